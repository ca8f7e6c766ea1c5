# mc1r_pipeline/core/abif_reader.py

import logging
import struct
from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from mc1r_pipeline.errors import FormatError
from mc1r_pipeline.models.chromatogram import Chromatogram

logger = logging.getLogger(__name__)

ABIF_MAGIC = b"ABIF"
ROOT_ENTRY_OFFSET = 6
DIR_ENTRY_SIZE = 28
MIN_FILE_SIZE = 64
DEFAULT_CHANNEL_ORDER = "GATC"
TRACE_TAG_NUMBERS = (9, 10, 11, 12)

# name, number, element type, element size, element count, data size, data offset, handle
_ENTRY = struct.Struct(">4sIHHIIII")


@dataclass(frozen=True)
class AbifDirectoryEntry:
    name: str
    number: int
    element_type: int
    element_size: int
    num_elements: int
    data_size: int
    data_offset: int
    handle: int

    @property
    def tag(self) -> str:
        return f"{self.name}{self.number}"

    def payload(self, data: bytes) -> bytes:
        # Payloads of 4 bytes or fewer live in the offset field itself.
        if self.data_size <= 4:
            return self.data_offset.to_bytes(4, "big")[: self.data_size]

        start, end = self.data_offset, self.data_offset + self.data_size
        if end > len(data):
            raise FormatError(f"Invalid offset for {self.tag}.")
        return data[start:end]


def _read_entry(data: bytes, offset: int) -> AbifDirectoryEntry:
    name, number, etype, esize, count, dsize, doffset, handle = _ENTRY.unpack_from(data, offset)
    return AbifDirectoryEntry(
        name=name.decode("latin-1"),
        number=number,
        element_type=etype,
        element_size=esize,
        num_elements=count,
        data_size=dsize,
        data_offset=doffset,
        handle=handle,
    )


def read_directory(data: bytes) -> List[AbifDirectoryEntry]:
    """
    Validates the ABIF header and returns every directory entry.

    The root entry at offset 6 points at a flat array of 28-byte entries;
    its element count is the number of entries in that array.
    """
    if len(data) < MIN_FILE_SIZE:
        raise FormatError("File too small to be an AB1 container.")
    if data[:4] != ABIF_MAGIC:
        raise FormatError("Not an AB1/ABIF file (bad magic).")

    root = _read_entry(data, ROOT_ENTRY_OFFSET)
    dir_offset = root.data_offset
    count = root.num_elements

    if dir_offset <= 0 or dir_offset + count * DIR_ENTRY_SIZE > len(data):
        raise FormatError("Invalid ABIF directory.")

    return [_read_entry(data, dir_offset + i * DIR_ENTRY_SIZE) for i in range(count)]


def _index_entries(entries: List[AbifDirectoryEntry]) -> Dict[str, AbifDirectoryEntry]:
    index: Dict[str, AbifDirectoryEntry] = {}
    for entry in entries:
        index.setdefault(entry.tag, entry)
    return index


def _raw(index: Dict[str, AbifDirectoryEntry], data: bytes, tag: str) -> bytes:
    entry = index.get(tag)
    if entry is None:
        raise FormatError(f"Missing AB1 tag {tag}.")
    return entry.payload(data)


def _short_array(raw: bytes, tag: str) -> np.ndarray:
    if len(raw) % 2 != 0:
        raise FormatError(f"{tag}: short array byte length must be even.")
    return np.frombuffer(raw, dtype=">i2").astype(np.int16)


def parse_abif(data: bytes, file_path: str = "<memory>") -> Chromatogram:
    """
    Decodes the Sanger trace tags of an ABIF container.

    Args:
        data (bytes): Whole file contents.
        file_path (str): Source path, kept on the chromatogram for reporting.

    Returns:
        Chromatogram with PBAS1 basecalls, PCON1 qualities, PLOC1 peak
        locations, FWO_1 channel order and DATA9-12 traces keyed by the
        channel-order letters.
    """
    index = _index_entries(read_directory(data))

    pbas = _raw(index, data, "PBAS1")
    pcon = _raw(index, data, "PCON1")
    ploc = _short_array(_raw(index, data, "PLOC1"), "PLOC1")

    channel_order = _raw(index, data, "FWO_1").decode("latin-1").strip("\x00 \t\r\n").upper()
    if len(channel_order) != 4:
        logger.warning(
            "%s: unexpected FWO_1 value '%s'; assuming %s.", file_path, channel_order, DEFAULT_CHANNEL_ORDER
        )
        channel_order = DEFAULT_CHANNEL_ORDER

    channels = [_short_array(_raw(index, data, f"DATA{n}"), f"DATA{n}") for n in TRACE_TAG_NUMBERS]

    if not (len(pbas) == len(pcon) == len(ploc)):
        raise FormatError(
            f"Inconsistent PBAS1/PCON1/PLOC1 lengths ({len(pbas)}/{len(pcon)}/{len(ploc)})."
        )

    chromatogram = Chromatogram(
        file_path=str(file_path),
        bases=pbas.decode("latin-1"),
        qualities=np.frombuffer(pcon, dtype=np.uint8).astype(np.int32),
        peak_locations=ploc,
        channel_order=channel_order,
        traces=dict(zip(channel_order, channels)),
    )
    logger.debug(
        "Decoded %s: %d bases, channel order %s, %d scans.",
        file_path, len(chromatogram), channel_order, len(channels[0]),
    )
    return chromatogram


def read_abif(file_path: str) -> Chromatogram:
    with open(file_path, "rb") as f:
        data = f.read()
    return parse_abif(data, file_path=str(file_path))

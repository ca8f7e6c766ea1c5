# mc1r_pipeline/utils/toy_data.py

import json
import random
import struct
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np

from mc1r_pipeline.core.abif_reader import ABIF_MAGIC, DIR_ENTRY_SIZE, TRACE_TAG_NUMBERS
from mc1r_pipeline.core.orientation import complement_base, reverse_complement
from mc1r_pipeline.models.chromatogram import Chromatogram

# ABIF element type codes
CHAR = 2
SHORT = 4
DIRECTORY = 1023

HEADER_SIZE = 128
PEAK_SHAPE = (0.1, 0.35, 0.75, 1.0, 0.75, 0.35, 0.1)


def make_toy_reference(length: int = 945, seed: int = 7) -> str:
    """Random CDS-shaped sequence: ATG ... TAA."""
    rng = random.Random(seed)
    body = "".join(rng.choice("ACGT") for _ in range(length - 6))
    return "ATG" + body + "TAA"


def synthesize_trace(
    bases: str,
    qualities: Optional[Sequence[int]] = None,
    secondary: Optional[Mapping[int, Sequence[Tuple[str, float]]]] = None,
    channel_order: str = "GATC",
    height: int = 1000,
    spacing: int = 12,
) -> Dict:
    """
    Builds clean, evenly spaced peaks for a basecall string.

    secondary maps a base index to (base, ratio) pairs: for each pair a peak
    of ratio * height is added at that position in the given channel.
    """
    n = len(bases)
    qualities = list(qualities) if qualities is not None else [40] * n
    secondary = secondary or {}
    scans = spacing * n + spacing
    traces = {ch: np.zeros(scans, dtype=np.int64) for ch in channel_order}
    half = len(PEAK_SHAPE) // 2
    locations = []

    def add_peak(channel: str, x: int, peak_height: float) -> None:
        if channel not in traces:
            return
        for k, factor in enumerate(PEAK_SHAPE):
            traces[channel][x - half + k] += int(round(peak_height * factor))

    for i, base in enumerate(bases):
        x = spacing // 2 + spacing * i
        locations.append(x)
        add_peak(base, x, height)
        for other, ratio in secondary.get(i, ()):
            add_peak(other, x, height * ratio)

    return {
        "bases": bases,
        "qualities": qualities,
        "peak_locations": locations,
        "channel_order": channel_order,
        "traces": {ch: np.clip(arr, -32768, 32767).astype(np.int16) for ch, arr in traces.items()},
    }


def reverse_complement_trace(trace: Dict) -> Dict:
    """The same read as the opposite strand's sequencing run would report it."""
    scans = len(next(iter(trace["traces"].values())))
    return {
        "bases": reverse_complement(trace["bases"]),
        "qualities": list(reversed(trace["qualities"])),
        "peak_locations": [scans - 1 - x for x in reversed(trace["peak_locations"])],
        "channel_order": trace["channel_order"],
        "traces": {
            ch: np.asarray(trace["traces"][complement_base(ch)])[::-1].copy()
            for ch in trace["channel_order"]
        },
    }


def to_chromatogram(trace: Dict, file_path: str = "toy.ab1") -> Chromatogram:
    return Chromatogram(
        file_path=file_path,
        bases=trace["bases"],
        qualities=np.asarray(trace["qualities"], dtype=np.int32),
        peak_locations=np.asarray(trace["peak_locations"], dtype=np.int16),
        channel_order=trace["channel_order"],
        traces={ch: np.asarray(arr, dtype=np.int16) for ch, arr in trace["traces"].items()},
    )


def _entry(name: str, number: int, etype: int, esize: int, count: int, size: int, offset: int) -> bytes:
    return struct.pack(">4sIHHIIII", name.encode("latin-1"), number, etype, esize, count, size, offset, 0)


def write_abif(path, trace: Dict, omit_tags: Iterable[str] = ()) -> Path:
    """
    Writes a minimal ABIF container holding the PBAS1/PCON1/PLOC1/FWO_1 and
    DATA9-12 tags. Tags named in omit_tags are left out.
    """
    omit = set(omit_tags)
    order = trace["channel_order"]
    items = [
        ("PBAS", 1, CHAR, 1, trace["bases"].encode("latin-1")),
        ("PCON", 1, CHAR, 1, bytes(int(q) for q in trace["qualities"])),
        ("PLOC", 1, SHORT, 2, np.asarray(trace["peak_locations"], dtype=">i2").tobytes()),
        ("FWO_", 1, CHAR, 1, order.encode("latin-1")),
    ]
    for number, channel in zip(TRACE_TAG_NUMBERS, order):
        items.append(("DATA", number, SHORT, 2, np.asarray(trace["traces"][channel], dtype=">i2").tobytes()))
    items = [item for item in items if f"{item[0]}{item[1]}" not in omit]

    body = bytearray()
    entries = []
    for name, number, etype, esize, payload in items:
        count = len(payload) // esize
        if len(payload) <= 4:
            offset = int.from_bytes(payload.ljust(4, b"\x00"), "big")
        else:
            offset = HEADER_SIZE + len(body)
            body.extend(payload)
        entries.append(_entry(name, number, etype, esize, count, len(payload), offset))

    dir_offset = HEADER_SIZE + len(body)
    root = _entry("tdir", 1, DIRECTORY, DIR_ENTRY_SIZE, len(entries), len(entries) * DIR_ENTRY_SIZE, dir_offset)
    header = (ABIF_MAGIC + struct.pack(">H", 101) + root).ljust(HEADER_SIZE, b"\x00")

    path = Path(path)
    path.write_bytes(header + bytes(body) + b"".join(entries))
    return path


def _write_fasta(path: Path, name: str, seq: str) -> None:
    lines = [f">{name}"]
    for i in range(0, len(seq), 60):
        lines.append(seq[i : i + 60])
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def make_toy_data(*, outdir) -> Dict[str, str]:
    """
    Writes a synthetic MC1R reference and three AB1 reads covering c.212-c.834:
    a clean forward read, the same read sequenced from the other strand, and a
    mixed-template read.
    """
    outdir_p = Path(outdir)
    outdir_p.mkdir(parents=True, exist_ok=True)

    ref = make_toy_reference()
    ref_fa = outdir_p / "toy_mc1r.fa"
    _write_fasta(ref_fa, "toy_MC1R_CDS", ref)

    read = ref[150:900]
    clean = synthesize_trace(read)
    rng = random.Random(11)
    mixed = synthesize_trace(
        read,
        secondary={i: [(rng.choice([b for b in "ACGT" if b != base]), 0.6)] for i, base in enumerate(read)},
    )

    clean_ab1 = write_abif(outdir_p / "clean_forward.ab1", clean)
    reverse_ab1 = write_abif(outdir_p / "clean_reverse.ab1", reverse_complement_trace(clean))
    mixed_ab1 = write_abif(outdir_p / "mixed_template.ab1", mixed)

    summary = {
        "reference": str(ref_fa),
        "clean_forward": str(clean_ab1),
        "clean_reverse": str(reverse_ab1),
        "mixed_template": str(mixed_ab1),
        "outdir": str(outdir_p),
    }
    with open(outdir_p / "toy_summary.json", "wt", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, sort_keys=True)
    return summary

#!/usr/bin/env python3
"""
Skiller Pro+ PCAP Parser - Extracts and decodes SET_REPORT control transfers
from pcapng files captured while the vendor tool changes settings.

Usage:
    python parse_captures.py <pcapng_file> [options]
    python parse_captures.py <file1> --diff <file2> [options]

Examples:
    python parse_captures.py red_p1.pcapng
    python parse_captures.py red_p1.pcapng --diff blue_p1.pcapng
    python parse_captures.py *.pcapng --summary
"""

import sys
import argparse
from pathlib import Path
from typing import Optional, List, Dict
from dataclasses import dataclass

from skiller.protocol import FRAME_LEN, REPORT_ID, SET_REPORT, REPORT_VALUE, decode_frame


@dataclass
class CapturedFrame:
    """One 8-byte feature report sent host -> device."""

    packet_number: int
    timestamp: float
    data: bytes

    def describe(self) -> str:
        try:
            f = decode_frame(self.data)
        except ValueError as e:
            return f"undecoded ({e})"
        parts = [f.command]
        if f.profile is not None:
            parts.append(f.profile.name)
        if f.setting is not None:
            parts.append(repr(f.setting))
        return " ".join(parts)


def _field(layer, *names):
    """Return the first attribute present on a pyshark layer, else None."""
    for name in names:
        value = getattr(layer, name, None)
        if value is not None:
            return value
    return None


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    return int(str(value), 0)


def _to_bytes(value) -> bytes:
    return bytes.fromhex(str(value).replace(":", "").replace(" ", ""))


def frame_from_packet(packet) -> Optional[CapturedFrame]:
    """Extract a SET_REPORT feature frame from a pyshark packet, or None."""
    usb = getattr(packet, "usb", None)
    if usb is None:
        return None

    request = _to_int(_field(usb, "setup_brequest", "brequest"))
    value = _to_int(_field(usb, "setup_wvalue", "wvalue"))
    if request != SET_REPORT or value not in (None, REPORT_VALUE):
        return None

    payload = _field(usb, "data_fragment", "capdata")
    if payload is None:
        return None
    data = _to_bytes(payload)
    if len(data) != FRAME_LEN or data[0] != REPORT_ID:
        return None

    return CapturedFrame(
        packet_number=int(packet.number),
        timestamp=float(packet.frame_info.time_relative),
        data=data,
    )


def extract_frames(packets) -> List[CapturedFrame]:
    frames = []
    for packet in packets:
        frame = frame_from_packet(packet)
        if frame is not None:
            frames.append(frame)
    return frames


def parse_frames(filepath: str) -> List[CapturedFrame]:
    """Parse a pcapng file and extract the keyboard's command frames."""
    import pyshark

    cap = pyshark.FileCapture(filepath, display_filter="usb.setup.bRequest == 9")
    try:
        return extract_frames(cap)
    finally:
        cap.close()


def label_byte_offset(offset: int) -> str:
    """Return a label for each byte of a command frame."""
    labels = {
        0: "report_id",
        1: "command",
        2: "profile/rate",
        3: "mode/lock",
        4: "tag",
        6: "color",
    }
    return labels.get(offset, "")


def compare_frames(frames1: List[CapturedFrame], frames2: List[CapturedFrame]) -> List[Dict]:
    """Compare frames pairwise in capture order and list differing bytes."""
    differences = []
    for index, (f1, f2) in enumerate(zip(frames1, frames2)):
        for offset in range(FRAME_LEN):
            if f1.data[offset] != f2.data[offset]:
                differences.append({
                    "frame": index,
                    "byte_offset": offset,
                    "old_hex": f"{f1.data[offset]:02x}",
                    "new_hex": f"{f2.data[offset]:02x}",
                    "label": label_byte_offset(offset),
                })
    return differences


def print_frames(frames: List[CapturedFrame]):
    for frame in frames:
        hex_str = " ".join(f"{b:02x}" for b in frame.data)
        print(f"Pkt #{frame.packet_number:<5} {frame.timestamp:10.6f}s  {hex_str}  {frame.describe()}")


def print_diff_table(differences: List[Dict], label1: str, label2: str):
    if not differences:
        print("\nNo differences found between captures.")
        return

    print(f"\n{'=' * 72}")
    print(f"DIFFERENCE ANALYSIS: {label1} vs {label2}")
    print(f"{'=' * 72}")
    print(f"{'Frame':<7} {'Offset':<8} {'Field':<14} {'Old':<6} {'New':<6}")
    print(f"{'-' * 72}")
    for diff in differences:
        label = diff["label"] or "unknown"
        print(f"{diff['frame']:<7} {diff['byte_offset']:<8} {label:<14} "
              f"0x{diff['old_hex']:<4} 0x{diff['new_hex']:<4}")
    print(f"{'-' * 72}")
    print(f"Total differences: {len(differences)}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Decode Skiller Pro+ feature reports from pcapng captures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s capture.pcapng                   # Decode a single capture
  %(prog)s cap1.pcapng --diff cap2.pcapng   # Compare two captures
  %(prog)s *.pcapng --summary               # Frame counts only
        """,
    )
    parser.add_argument("files", nargs="+", help="pcapng file(s) to analyze")
    parser.add_argument("--diff", metavar="FILE", help="Compare with second capture file")
    parser.add_argument("--summary", action="store_true", help="Print summary only")
    args = parser.parse_args(argv)

    if args.diff and len(args.files) != 1:
        parser.error("--diff requires exactly one file as first argument")

    all_frames = {}
    for filepath in args.files + ([args.diff] if args.diff else []):
        if not Path(filepath).exists():
            print(f"Error: File not found: {filepath}")
            return 1
        frames = parse_frames(filepath)
        all_frames[filepath] = frames
        if not args.summary and not args.diff:
            print(f"\n{filepath}: {len(frames)} frame(s)")
            print_frames(frames)

    if args.summary:
        print(f"{'File':<50} {'Frames':<8}")
        print(f"{'-' * 60}")
        for filepath, frames in all_frames.items():
            print(f"{Path(filepath).name[:48]:<50} {len(frames):<8}")

    if args.diff:
        file1, file2 = args.files[0], args.diff
        differences = compare_frames(all_frames[file1], all_frames[file2])
        print_diff_table(differences, Path(file1).stem, Path(file2).stem)

    return 0


if __name__ == "__main__":
    sys.exit(main())

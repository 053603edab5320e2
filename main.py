"""High-level API + CLI for the receipt OCR suggestion engine."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm

from pipeline.hybrid import CONFIG_PATH, HybridOrchestrator
from pipeline.suggest import ReceiptSuggestion


class ReceiptOCRAPI:
    """High-level orchestration API usable from CLI or notebooks."""

    def __init__(
        self,
        config_path: Path = CONFIG_PATH,
        orchestrator: HybridOrchestrator | None = None,
    ):
        self.config_path = config_path
        self.orchestrator = orchestrator or HybridOrchestrator.from_config(config_path)

    def scan(self, image_path: str | Path, force_remote: bool = False) -> ReceiptSuggestion:
        path = Path(image_path)
        if not path.exists():
            raise FileNotFoundError(f"Receipt image not found: '{path}'")
        return self.orchestrator.process(path, force_remote=force_remote)

    def scan_many(
        self,
        image_paths: list[str | Path],
        save_dir: str | Path | None = None,
        force_remote: bool = False,
    ) -> list[dict[str, Any]]:
        out_dir = Path(save_dir) if save_dir else None
        if out_dir is not None:
            out_dir.mkdir(parents=True, exist_ok=True)

        outputs = []
        for image_path in tqdm(image_paths, desc="receipts", unit="img"):
            path = Path(image_path)
            result = self.scan(path, force_remote=force_remote).to_dict()
            result["image"] = str(path)

            if out_dir is not None:
                with open(out_dir / f"{path.stem}.json", "w", encoding="utf-8") as f:
                    json.dump(result, f, indent=2, ensure_ascii=False)
            outputs.append(result)

        return outputs

    def parse_text(self, text: str) -> ReceiptSuggestion:
        return self.orchestrator.parse_text(text)


# -------------------- CLI commands --------------------

def _api(args: argparse.Namespace) -> ReceiptOCRAPI:
    api = ReceiptOCRAPI(config_path=Path(args.config))
    if getattr(args, "threshold", None) is not None:
        api.orchestrator.confidence_threshold = float(args.threshold)
    return api


def cmd_scan(args: argparse.Namespace) -> None:
    api = _api(args)
    out = api.scan(args.image, force_remote=args.force_remote)
    print(json.dumps(out.to_dict(), indent=2, ensure_ascii=False))


def cmd_batch(args: argparse.Namespace) -> None:
    api = _api(args)
    outputs = api.scan_many(args.images, save_dir=args.out, force_remote=args.force_remote)
    manual = sum(1 for o in outputs if o["should_manual"])
    print(f"[batch] Processed {len(outputs)} receipts ({manual} need manual entry). Results in {args.out}/")


def cmd_parse(args: argparse.Namespace) -> None:
    api = _api(args)
    text = sys.stdin.read() if args.text == "-" else args.text
    out = api.parse_text(text)
    print(json.dumps(out.to_dict(), indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Receipt OCR field suggestions")
    parser.add_argument("--config", default=str(CONFIG_PATH), help="Path to ocr.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    scan_p = sub.add_parser("scan", help="Suggest payment fields for one receipt image")
    scan_p.add_argument("image", help="Receipt image path")
    scan_p.add_argument("--force-remote", action="store_true", help="Skip local recognition")
    scan_p.add_argument("--threshold", type=float, default=None, help="Fallback confidence threshold")

    batch_p = sub.add_parser("batch", help="Suggest fields for many images, one JSON per image")
    batch_p.add_argument("images", nargs="+", help="Receipt image paths")
    batch_p.add_argument("--out", default="outputs/suggestions", help="Output directory")
    batch_p.add_argument("--force-remote", action="store_true", help="Skip local recognition")
    batch_p.add_argument("--threshold", type=float, default=None, help="Fallback confidence threshold")

    parse_p = sub.add_parser("parse", help="Suggest fields from already-extracted text")
    parse_p.add_argument("text", help="Receipt text, or '-' to read stdin")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {
        "scan": cmd_scan,
        "batch": cmd_batch,
        "parse": cmd_parse,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()

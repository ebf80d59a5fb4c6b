"""Command-line host for PDF Autofill.

    pdfautofill fields form.pdf
    pdfautofill analyze form.pdf --context "Foreign account declaration"
    pdfautofill export form.pdf --values values.json -o filled.pdf
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Callable, Dict, List, Optional

from dotenv import load_dotenv

from .acroform import has_acroform, list_field_names
from .config import Settings
from .errors import AutofillError, InvalidContextError
from .llm import CompletionClient, GeminiCompletionClient
from .models import SignaturePlacement
from .parser import extract_document
from .pipeline import analyze_document, export_document
from .policy import AllFieldsPolicy, FieldPolicy, LabelledFieldsPolicy, institution_policy
from .utils import configure_logging

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings], CompletionClient]

_POLICIES: Dict[str, Callable[[], FieldPolicy]] = {
    "all": AllFieldsPolicy,
    "labelled": LabelledFieldsPolicy,
    "institution": institution_policy,
}


def _load_values(path: str) -> Dict[str, str]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(payload, dict) and isinstance(payload.get("fields"), list):
        # Output of ``analyze --json``
        return {
            entry["field_name"]: entry["suggested_value"]
            for entry in payload["fields"]
            if entry.get("suggested_value") is not None
        }
    if not isinstance(payload, dict):
        raise ValueError("Values file must hold a JSON object of field name -> value.")
    return {str(name): str(value) for name, value in payload.items() if value is not None}


def _cmd_fields(args: argparse.Namespace, client_factory: ClientFactory) -> int:
    source = Path(args.pdf).read_bytes()
    if args.acroform:
        if not has_acroform(source):
            print("No AcroForm in this PDF.", file=sys.stderr)
            return 0
        for name in list_field_names(source):
            print(name)
        return 0
    document = extract_document(source)
    for descriptor in document.fields:
        options = f" options={list(descriptor.options)}" if descriptor.options else ""
        print(f"{descriptor.name}\t{descriptor.kind.value}\t{descriptor.inferred_label or ''}{options}")
    return 0


def _cmd_analyze(args: argparse.Namespace, client_factory: ClientFactory) -> int:
    client = client_factory(Settings.from_env())
    result = analyze_document(
        Path(args.pdf).read_bytes(),
        args.context,
        client=client,
        policy=_POLICIES[args.policy](),
    )
    if args.json:
        print(json.dumps({"context": result.context, "fields": [asdict(s) for s in result.fields]}, indent=2, ensure_ascii=False))
        return 0
    print(f"Context: {result.context or '(none)'}")
    for suggestion in result.fields:
        value = "<leave empty>" if suggestion.suggested_value is None else suggestion.suggested_value
        print(f"{suggestion.field_name}: {value} ({suggestion.confidence:.2f})")
    return 0


def _signature_from_args(args: argparse.Namespace) -> Optional[SignaturePlacement]:
    if not args.signature:
        return None
    return SignaturePlacement(
        image_bytes=Path(args.signature).read_bytes(),
        x=args.sig_x,
        y=args.sig_y,
        width=args.sig_width,
        height=args.sig_height,
        container_width=args.container_width,
        container_height=args.container_height,
        page_index=args.page,
    )


def _cmd_export(args: argparse.Namespace, client_factory: ClientFactory) -> int:
    values = _load_values(args.values) if args.values else {}
    output = export_document(
        Path(args.pdf).read_bytes(),
        values,
        signature=_signature_from_args(args),
        flatten=not args.no_flatten,
    )
    Path(args.output).write_bytes(output)
    print(f"Wrote {args.output} ({len(output):,} bytes)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pdfautofill", description="Suggest and fill PDF form values.")
    parser.add_argument("--log-level", default=None, help="Overrides PDFAUTOFILL_LOG")
    commands = parser.add_subparsers(dest="command", required=True)

    fields_cmd = commands.add_parser("fields", help="List form fields and their inferred labels")
    fields_cmd.add_argument("pdf")
    fields_cmd.add_argument("--acroform", action="store_true", help="List raw AcroForm field names instead")
    fields_cmd.set_defaults(handler=_cmd_fields)

    analyze_cmd = commands.add_parser("analyze", help="Ask the model for field values")
    analyze_cmd.add_argument("pdf")
    analyze_cmd.add_argument("--context", default=None, help="Describe the document and your situation")
    analyze_cmd.add_argument("--policy", choices=sorted(_POLICIES), default="all")
    analyze_cmd.add_argument("--json", action="store_true", help="Print machine-readable output")
    analyze_cmd.set_defaults(handler=_cmd_analyze)

    export_cmd = commands.add_parser("export", help="Write a filled copy of the PDF")
    export_cmd.add_argument("pdf")
    export_cmd.add_argument("-o", "--output", required=True)
    export_cmd.add_argument("--values", help="JSON object of field name -> value, or analyze --json output")
    export_cmd.add_argument("--no-flatten", action="store_true", help="Keep the form interactive")
    export_cmd.add_argument("--signature", help="PNG image of the signature")
    export_cmd.add_argument("--sig-x", type=float, default=0.0)
    export_cmd.add_argument("--sig-y", type=float, default=0.0)
    export_cmd.add_argument("--sig-width", type=float, default=150.0)
    export_cmd.add_argument("--sig-height", type=float, default=60.0)
    export_cmd.add_argument("--container-width", type=float, default=595.0)
    export_cmd.add_argument("--container-height", type=float, default=842.0)
    export_cmd.add_argument("--page", type=int, default=0)
    export_cmd.set_defaults(handler=_cmd_export)
    return parser


def main(argv: Optional[List[str]] = None, client_factory: ClientFactory = GeminiCompletionClient) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    try:
        return args.handler(args, client_factory)
    except InvalidContextError as exc:
        print(f"Context rejected: {exc.reason}", file=sys.stderr)
        return 2
    except AutofillError as exc:
        code = exc.code.value if exc.code else "ERROR"
        print(f"{code}: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

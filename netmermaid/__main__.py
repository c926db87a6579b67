import argparse
import logging
import sys

from pydantic import ValidationError

from .core.catalog import CatalogLoadError, get_provider
from .core.diagrams import DiagramService
from .setting import get_settings


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netmermaid",
        description="Generate Mermaid class diagrams for a .NET namespace",
    )
    parser.add_argument("namespace", help="Root namespace (e.g. Shop)")
    parser.add_argument(
        "--sub-scope",
        type=str,
        default=None,
        help="Namespace suffix below the root (default: .Database.Entities)"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--source", type=str, help="C# source directory or .cs file")
    source.add_argument("--schema", type=str, help="YAML/JSON type catalog file")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Directory for the generated .md file (default: working directory)"
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the diagram instead of writing a file"
    )
    parser.add_argument("--config", type=str, default=None, help="Path to netmermaid.yaml")
    parser.add_argument(
        "--include-interfaces",
        action="store_true",
        default=None,
        help="Draw interface types as blocks"
    )
    parser.add_argument(
        "--include-fields",
        action="store_true",
        default=None,
        help="List fields alongside properties"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    return parser


def main(argv=None) -> int:
    """Main entry point for netmermaid."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings(args.config)
    except ValidationError as e:
        setup_logging("ERROR")
        logger.error(f"Invalid settings: {e}")
        return 2

    overrides = {
        "include_interfaces": args.include_interfaces,
        "include_fields": args.include_fields,
        "log_level": args.log_level,
    }
    settings = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    setup_logging(settings.log_level)

    try:
        provider = get_provider(
            args.source or args.schema,
            include_interfaces=settings.include_interfaces,
            include_fields=settings.include_fields,
        )
        service = DiagramService(provider, settings)

        if args.stdout:
            sys.stdout.write(service.generate(args.namespace, args.sub_scope) + "\n")
        else:
            path = service.write_markdown(args.namespace, args.sub_scope, args.output)
            print(path)
    except CatalogLoadError as e:
        logger.error(f"Diagram generation failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

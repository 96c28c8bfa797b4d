"""Command-line entry point: dtoforge SCHEMA [-o OUT] [options]."""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dtoforge.core.config import Settings
from dtoforge.core.logging import configure_logging
from dtoforge.dto_gen.errors import DtoGenError
from dtoforge.dto_gen.generator import generate_dtos
from dtoforge.dto_gen.types import NamingStyle, OutputLayout

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dtoforge",
        description="Generate Pydantic DTO modules from an annotated schema document",
    )
    parser.add_argument("schema", type=Path, help="Schema document (.json, .yaml or .yml)")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Output directory (default: DTOFORGE_OUTPUT_DIR or generated/dto)")
    parser.add_argument("--layout", choices=[l.value for l in OutputLayout], default=None,
                        help="Output layout")
    parser.add_argument("--naming-style", choices=[s.value for s in NamingStyle], default=None,
                        help="File and folder naming style")
    parser.add_argument("--re-export", action="store_true", default=None,
                        help="Write __init__.py files re-exporting every module")
    parser.add_argument("--log-level", default=None, help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.output is not None:
        overrides["output_dir"] = str(args.output)
    if args.layout is not None:
        overrides["output_layout"] = OutputLayout(args.layout)
    if args.naming_style is not None:
        overrides["file_naming_style"] = NamingStyle(args.naming_style)
    if args.re_export:
        overrides["re_export"] = True
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    settings = Settings().model_copy(update=overrides)

    configure_logging(settings.log_level)
    try:
        generate_dtos(args.schema, Path(settings.output_dir), settings.to_generator_config())
    except DtoGenError as e:
        log.error("Generation failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

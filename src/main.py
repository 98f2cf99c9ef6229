#!/usr/bin/env python3
"""
MSG Reader
Command-line entry point: parses Outlook .msg files and prints their contents
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.utils.config import Config, ConfigurationError
from src.utils.logging_utils import setup_logging
from src.utils.sanitization import sanitize_for_logging
from src.modules.msg_adapter import DecoderContext
from src.modules.msg_parser import MsgParser
from src.modules.message_renderer import (
    find_msg_files,
    log_message_summary,
    message_to_dict,
    render_message,
    save_attachment,
)


APP_NAME = "MSG Reader"
APP_VERSION = "1.0.0"

EXIT_OK = 0
EXIT_PARSE_FAILURE = 1
EXIT_CONFIG_ERROR = 2


class MsgReader:
    """Parses the requested files one at a time and renders each result"""

    def __init__(self, config: Config):
        """
        Initialize reader

        Args:
            config: Loaded and validated configuration
        """
        self.config = config

        setup_logging(
            self.config.system.log_level,
            self.config.system.log_file,
            self.config.system.log_format,
        )
        self.logger = logging.getLogger("MsgReader")

        # One decoder context for the whole run
        self.parser = MsgParser(DecoderContext(self.config.decoder))

    def collect_files(self, paths: List[str]) -> List[Path]:
        """Expand directories into their .msg files, keeping argument order"""
        files: List[Path] = []
        for raw in paths:
            path = Path(raw)
            if path.is_dir():
                found = find_msg_files(path)
                if not found:
                    self.logger.warning(
                        f"No .msg files in {sanitize_for_logging(str(path))}"
                    )
                files.extend(found)
            else:
                files.append(path)
        return files

    def run(
        self,
        paths: List[str],
        as_json: bool = False,
        save_dir: Optional[str] = None,
    ) -> int:
        """
        Parse and render every input

        Returns:
            Process exit code
        """
        files = self.collect_files(paths)
        if not files:
            self.logger.error("No input files")
            return EXIT_PARSE_FAILURE

        exit_code = EXIT_OK
        results = []
        for path in files:
            message = self.parser.parse(str(path))
            log_message_summary(message, str(path))

            if not message.is_valid:
                exit_code = EXIT_PARSE_FAILURE
            elif save_dir:
                self._save_attachments(message, Path(save_dir) / path.stem)

            if as_json:
                results.append({"path": str(path), **message_to_dict(message)})
            else:
                color = self.config.output.color and sys.stdout.isatty()
                print(render_message(message, color=color))
                print()

        if as_json:
            print(json.dumps(results, indent=2, ensure_ascii=False))

        return exit_code

    def _save_attachments(self, message, directory: Path) -> None:
        for attachment in message.attachments:
            try:
                save_attachment(
                    attachment,
                    directory,
                    overwrite=self.config.output.overwrite_attachments,
                )
            except OSError as e:
                self.logger.error(
                    f"Failed to save attachment "
                    f"{sanitize_for_logging(attachment.filename)}: {e}"
                )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="msg-reader",
        description="Read Outlook .msg files and print their contents.",
    )
    parser.add_argument("paths", nargs="+", metavar="PATH",
                        help=".msg file or directory containing .msg files")
    parser.add_argument("--env", default=".env",
                        help="Environment file with settings (default: .env)")
    parser.add_argument("--save-attachments", action="store_true",
                        help="Save attachments under <output dir>/<message name>/")
    parser.add_argument("--output-dir", metavar="DIR",
                        help="Attachment output directory (default: ATTACHMENT_OUTPUT_DIR)")
    parser.add_argument("--json", action="store_true",
                        help="Print a JSON summary instead of text")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    parser.add_argument("--version", action="version",
                        version=f"{APP_NAME} {APP_VERSION}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_arg_parser().parse_args(argv)

    config = Config(args.env)
    if args.log_level:
        config.system.log_level = args.log_level
    try:
        config.validate()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    save_dir = None
    if args.save_attachments:
        save_dir = args.output_dir or config.output.attachment_dir
    reader = MsgReader(config)
    return reader.run(args.paths, as_json=args.json, save_dir=save_dir)


if __name__ == "__main__":
    sys.exit(main())

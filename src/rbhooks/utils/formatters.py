"""Report formatters for rbhooks commands.

The checks print their own glyph-prefixed progress while they run. These
formatters render the summary afterwards: a short text footer for people, or
a JSON document for scripts and CI (``--format json``).

JSON command results follow this shape:
{
    "success": boolean,
    "message": string,
    "data": object,
    "warnings": array,
    "errors": array
}
"""

import json
import os
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, TextIO

from ..types.enums import OutputFormat


class BaseFormatter(ABC):
    """Common interface of the output formatters."""

    def __init__(self, file: Optional[TextIO] = None):
        self.file = file

    @abstractmethod
    def format_command_result(
        self,
        success: bool,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        warnings: Optional[List[str]] = None,
        errors: Optional[List[str]] = None
    ) -> str:
        """Format the outcome of an installer or utility command."""

    @abstractmethod
    def format_pipeline_result(self, report: Dict[str, Any]) -> str:
        """Format ``PipelineResult.to_dict()``."""

    @abstractmethod
    def format_config(self, config: Dict[str, Any], source: Optional[str]) -> str:
        """Format the effective hook configuration."""

    def emit(self, text: str) -> None:
        if text:
            print(text, file=self.file if self.file is not None else sys.stdout)


class JSONFormatter(BaseFormatter):
    """Structured JSON output."""

    def __init__(self, file: Optional[TextIO] = None, pretty: bool = True):
        super().__init__(file)
        self.pretty = pretty

    def format_command_result(
        self,
        success: bool,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        warnings: Optional[List[str]] = None,
        errors: Optional[List[str]] = None
    ) -> str:
        return self._format_json({
            "success": success,
            "message": message,
            "data": data or {},
            "warnings": warnings or [],
            "errors": errors or [],
        })

    def format_pipeline_result(self, report: Dict[str, Any]) -> str:
        return self._format_json(report)

    def format_config(self, config: Dict[str, Any], source: Optional[str]) -> str:
        return self._format_json({"source": source, "hooks": config})

    def _format_json(self, obj: Any) -> str:
        if self.pretty:
            return json.dumps(obj, ensure_ascii=False, indent=2)
        return json.dumps(obj, ensure_ascii=False, separators=(',', ':'))


class TextFormatter(BaseFormatter):
    """Human-readable output with optional ANSI colors."""

    STATUS_SYMBOLS = {
        "passed": "✅",
        "warned": "⚠️",
        "failed": "❌",
        "skipped": "⏭️",
        "error": "❌",
    }

    def __init__(self, file: Optional[TextIO] = None):
        super().__init__(file)
        self._supports_color = self._check_color_support()

    def format_command_result(
        self,
        success: bool,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        warnings: Optional[List[str]] = None,
        errors: Optional[List[str]] = None
    ) -> str:
        lines = []
        status_symbol = "✅" if success else "❌"
        status_color = self._green if success else self._red
        lines.append(f"{status_color}{status_symbol} {message}{self._reset}")

        if data:
            for key, value in data.items():
                if isinstance(value, (list, tuple)):
                    if not value:
                        continue
                    lines.append(f"  {key}:")
                    lines.extend(f"    - {item}" for item in value)
                else:
                    lines.append(f"  {key}: {value}")

        if warnings:
            lines.append("")
            for warning in warnings:
                lines.append(f"{self._yellow}⚠️ {warning}{self._reset}")

        if errors:
            lines.append("")
            for error in errors:
                lines.append(f"{self._red}❌ {error}{self._reset}")

        return "\n".join(lines)

    def format_pipeline_result(self, report: Dict[str, Any]) -> str:
        lines = ["", f"{self._bold}Summary{self._reset}"]
        for result in report.get("results", []):
            symbol = self.STATUS_SYMBOLS.get(result.get("status"), "•")
            lines.append(f"  {symbol} {result.get('check')}: {result.get('status')}")

        error = report.get("error")
        if error:
            lines.append(f"{self._red}❌ {error.get('message')}{self._reset}")
            if error.get("suggested_fix"):
                lines.append(f"💡 {error['suggested_fix']}")
        elif report.get("success"):
            lines.append(f"{self._green}🎉 All checks passed.{self._reset}")
        else:
            lines.append(f"{self._red}❌ Commit blocked.{self._reset}")
        return "\n".join(lines)

    def format_config(self, config: Dict[str, Any], source: Optional[str]) -> str:
        lines = [f"{self._bold}Configuration:{self._reset} {source or 'defaults (no hooks-config file found)'}"]
        for name, hook in config.items():
            state = "enabled" if hook.get("enabled") else "disabled"
            mode = "enforcing" if hook.get("enforce") else "advisory"
            lines.append(f"  {name}: {state}, {mode}")
            for key, value in (hook.get("settings") or {}).items():
                lines.append(f"    {key}: {json.dumps(value, ensure_ascii=False)}")
        return "\n".join(lines)

    def _check_color_support(self) -> bool:
        stream = self.file if self.file is not None else sys.stdout
        return (
            hasattr(stream, 'isatty') and stream.isatty() and
            os.environ.get('TERM', '').lower() != 'dumb' and
            os.environ.get('NO_COLOR') is None
        )

    @property
    def _reset(self) -> str:
        return "\033[0m" if self._supports_color else ""

    @property
    def _bold(self) -> str:
        return "\033[1m" if self._supports_color else ""

    @property
    def _green(self) -> str:
        return "\033[32m" if self._supports_color else ""

    @property
    def _red(self) -> str:
        return "\033[31m" if self._supports_color else ""

    @property
    def _yellow(self) -> str:
        return "\033[33m" if self._supports_color else ""


def create_formatter(format_type: str, file: Optional[TextIO] = None) -> BaseFormatter:
    """Formatter for ``format_type`` ("text" or "json").

    Raises:
        ValueError: If the format type is not supported
    """
    output_format = OutputFormat.from_string(format_type)
    if output_format is OutputFormat.JSON:
        return JSONFormatter(file)
    return TextFormatter(file)

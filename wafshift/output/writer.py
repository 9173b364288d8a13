"""Result files — detailed text, one-variant-per-line text, and JSONL."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

import aiofiles

from wafshift.config import OutputSettings
from wafshift.models.result import GenerationReport

logger = logging.getLogger(__name__)

DETAILED_FILE = "payloads_output.txt"
SIMPLE_FILE = "payloads_simple.txt"
JSONL_FILE = "results.jsonl"


def _one_line(variant: str) -> str:
    """Escape line breaks so a variant stays on a single line."""
    return variant.replace("\r", "\\r").replace("\n", "\\n")


class PayloadFileWriter:
    """Writes a GenerationReport into an output directory.

    The detailed file is always written; the simple and JSONL files are
    controlled by the flags. Text that cannot be encoded as UTF-8 (lone
    surrogates from undecodable command-line bytes) is written as
    backslash escapes.
    """

    def __init__(
        self,
        directory: Path | str,
        *,
        write_simple: bool = True,
        write_jsonl: bool = True,
    ) -> None:
        self.directory = Path(directory)
        self.write_simple = write_simple
        self.write_jsonl = write_jsonl

    @classmethod
    def from_settings(cls, settings: OutputSettings) -> PayloadFileWriter:
        return cls(
            settings.directory,
            write_simple=settings.write_simple,
            write_jsonl=settings.write_jsonl,
        )

    async def write(self, report: GenerationReport) -> list[Path]:
        """Write all enabled files and return their paths."""
        self.directory.mkdir(parents=True, exist_ok=True)
        written = [await self._write_detailed(report)]
        if self.write_simple:
            written.append(await self._write_simple(report))
        if self.write_jsonl:
            written.append(await self._write_jsonl(report))
        logger.info("Wrote %d variants to %s", report.total_variants, self.directory)
        return written

    async def _write_detailed(self, report: GenerationReport) -> Path:
        path = self.directory / DETAILED_FILE
        records = report.payload_results
        generated = datetime.now(tz=UTC).isoformat(timespec="seconds")
        async with aiofiles.open(path, mode="w", encoding="utf-8", errors="backslashreplace") as f:
            await f.write(f"# Generated Payloads - {len(records)} payload sets\n")
            await f.write(f"# Generated at: {generated}\n")
            await f.write(f"# Evasion level: {report.level.label}\n")
            if report.fingerprint is not None:
                fp = report.fingerprint
                await f.write(f"# WAF: {fp.waf_type} ({fp.confidence:.0%})\n")
            await f.write("\n")
            for record in records:
                await f.write(f"## Attack Type: {record.attack_type}\n")
                await f.write(f"## Evasion Type: {record.technique}\n")
                await f.write(f"## Original Payload: {record.original_payload}\n\n")
                for variant in record.variants:
                    await f.write(f"{variant}\n")
                await f.write("\n---\n\n")
        return path

    async def _write_simple(self, report: GenerationReport) -> Path:
        path = self.directory / SIMPLE_FILE
        async with aiofiles.open(path, mode="w", encoding="utf-8", errors="backslashreplace") as f:
            for record in report.payload_results:
                for variant in record.variants:
                    await f.write(_one_line(variant) + "\n")
        return path

    async def _write_jsonl(self, report: GenerationReport) -> Path:
        path = self.directory / JSONL_FILE
        async with aiofiles.open(path, mode="w", encoding="utf-8", errors="backslashreplace") as f:
            for record in report.payload_results:
                line = json.dumps(record.model_dump(mode="json"), ensure_ascii=False)
                await f.write(line + "\n")
        return path

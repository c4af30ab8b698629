"""Serialization of scan results to plain records, JSON and YAML.

Renderers and the ``--json`` output consume the dict form produced
here.  Priorities are written as lowercase level names and paths as
POSIX strings.

Usage
-----
::

    from todotree.results.serializer import ResultSerializer

    serializer = ResultSerializer()
    text = serializer.to_json(scan_result)
    restored = serializer.from_json(text)
    assert restored == scan_result
"""
from __future__ import annotations

import json
from typing import Any

import yaml

from todotree.results.models import AnnotationItem, FileResult, ScanResult, Summary
from todotree.tags.defaults import Priority


class ResultSerializer:
    """Converts between ``ScanResult`` objects and plain Python dicts."""

    # ------------------------------------------------------------------
    # Serialization (result → dict)
    # ------------------------------------------------------------------

    def to_dict(self, result: ScanResult) -> dict[str, Any]:
        """Serialize a ``ScanResult`` to a JSON-compatible dict."""
        return {
            "root": result.root,
            "files": [self._file_to_dict(f) for f in result.files],
            "summary": self._summary_to_dict(result.summary),
        }

    def _file_to_dict(self, file_result: FileResult) -> dict[str, Any]:
        data: dict[str, Any] = {
            "path": file_result.file_path,
            "items": [self._item_to_dict(i) for i in file_result.items],
        }
        if file_result.error is not None:
            data["error"] = file_result.error
        return data

    def _item_to_dict(self, item: AnnotationItem) -> dict[str, Any]:
        return {
            "tag": item.tag_name,
            "priority": item.priority.label,
            "line": item.line_number,
            "column": item.column,
            "text": item.raw_text,
            "marker": item.marker_used,
            "author": item.author,
            "line_content": item.line_content,
        }

    def _summary_to_dict(self, summary: Summary) -> dict[str, Any]:
        return {
            "total_count": summary.total_count,
            "files_scanned": summary.files_scanned,
            "files_with_items": summary.files_with_items,
            "error_file_count": summary.error_file_count,
            "by_tag": dict(summary.by_tag),
            "by_priority": {p.label: n for p, n in summary.by_priority.items()},
        }

    # ------------------------------------------------------------------
    # Deserialization (dict → result)
    # ------------------------------------------------------------------

    def from_dict(self, data: dict[str, Any]) -> ScanResult:
        """Rebuild a ``ScanResult``; the summary is recomputed."""
        files = tuple(self._file_from_dict(f) for f in data.get("files", []))
        return ScanResult(
            files=files,
            summary=Summary.from_files(files),
            root=str(data.get("root", "")),
        )

    def _file_from_dict(self, data: dict[str, Any]) -> FileResult:
        path = str(data["path"])
        return FileResult(
            file_path=path,
            items=tuple(self._item_from_dict(i, path) for i in data.get("items", [])),
            error=data.get("error"),
        )

    def _item_from_dict(self, data: dict[str, Any], path: str) -> AnnotationItem:
        return AnnotationItem(
            file_path=path,
            line_number=int(data["line"]),
            column=int(data["column"]),
            tag_name=str(data["tag"]),
            priority=Priority.parse(data["priority"]),
            raw_text=str(data.get("text", "")),
            marker_used=str(data.get("marker", "")),
            author=data.get("author"),
            line_content=str(data.get("line_content", "")),
        )

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------

    def to_json(self, result: ScanResult, indent: int = 2) -> str:
        """Serialize a ``ScanResult`` to a JSON string."""
        return json.dumps(self.to_dict(result), indent=indent, ensure_ascii=False)

    def from_json(self, text: str) -> ScanResult:
        """Deserialize a ``ScanResult`` from a JSON string."""
        return self.from_dict(json.loads(text))

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------

    def to_yaml(self, result: ScanResult) -> str:
        """Serialize a ``ScanResult`` to a YAML string."""
        return yaml.dump(
            self.to_dict(result), default_flow_style=False, allow_unicode=True, sort_keys=False
        )

    def from_yaml(self, text: str) -> ScanResult:
        """Deserialize a ``ScanResult`` from a YAML string."""
        return self.from_dict(yaml.safe_load(text))

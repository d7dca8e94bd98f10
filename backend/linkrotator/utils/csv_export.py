from typing import Any, Iterable, Mapping, Sequence

from fastapi.responses import Response


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _escape(text: str) -> str:
    if any(char in text for char in ',"\n\r'):
        return '"' + text.replace('"', '""') + '"'
    return text


def convert_to_csv(rows: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> str:
    """
    Serialize rows to comma-separated text.

    Fields containing a comma, a quote or a newline are quoted and embedded
    quotes are doubled. Rows are joined with ``\\n`` and there is no
    trailing newline. An empty row list yields an empty string.
    """
    if not rows:
        return ""

    lines = [",".join(_escape(column) for column in columns)]
    for row in rows:
        lines.append(",".join(_escape(_format_value(row.get(column))) for column in columns))
    return "\n".join(lines)


def rows_from_models(items: Iterable[Any], columns: Sequence[str]) -> list[dict]:
    """Pull the exported columns off ORM objects"""
    return [{column: getattr(item, column, None) for column in columns} for item in items]


def csv_response(content: str, filename: str) -> Response:
    """Return CSV text as a file download"""
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

"""Response export — CSV and JSON dumps of every live response."""

import csv
import io
import json
import re
from datetime import datetime

from tempforms.services.forms import format_answer
from tempforms.services.stores import FormRecord, ResponseRecord


def safe_filename(title: str) -> str:
    """Lowercase, underscore-separated, at most 50 chars."""
    cleaned = re.sub(r"[^a-z0-9]", "_", (title or "").lower())
    cleaned = re.sub(r"_+", "_", cleaned).strip("_")[:50]
    return cleaned or "form_responses"


def export_csv(form: FormRecord, responses: list[ResponseRecord]) -> str:
    fields = sorted(form.fields, key=lambda f: f.order)

    output = io.StringIO()
    writer = csv.writer(output)

    # Header row: Submitted At, field labels in form order
    writer.writerow(["Submitted At", *(f.label for f in fields)])

    # Oldest first so the sheet reads chronologically
    for resp in sorted(responses, key=lambda r: r.submitted_at):
        row = [resp.submitted_at.isoformat()]
        for field in fields:
            value = resp.answers.get(field.id)
            row.append(format_answer(field, value) if value is not None else "")
        writer.writerow(row)

    return output.getvalue()


def export_json(form: FormRecord, responses: list[ResponseRecord], now: datetime) -> str:
    payload = {
        "form": {
            "title": form.title,
            "description": form.description,
            "fields": [f.model_dump(mode="json") for f in sorted(form.fields, key=lambda f: f.order)],
            "exportedAt": now.isoformat(),
        },
        "responses": [
            {
                "id": r.id,
                "submittedAt": r.submitted_at.isoformat(),
                "answers": r.answers,
            }
            for r in sorted(responses, key=lambda r: r.submitted_at)
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)

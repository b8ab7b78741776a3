"""Prompt builder for narrative insights over an ingested sales table."""

import json
from typing import Any, Dict, List

from app.domain.sales_table import Table

_SYSTEM_INSTRUCTIONS = """\
You are a performance-marketing analyst reviewing a sales export whose rows
carry UTM attribution (source, campaign, content).

RULES:
- Use ONLY the data provided below. Do not invent campaigns or figures.
- Point out which sources, campaigns and products drive revenue.
- Flag anomalies and concentration risks.
- Finish with three to five concrete, actionable recommendations.
- Answer in {language}, in plain text with short paragraphs and bullet points.
"""

_SECTION_TEMPLATE = """\
## {title}
```json
{data}
```
"""


class InsightPromptBuilder:
    """Builds a deterministic prompt from a typed table.

    Only the first ``sample_rows`` rows are embedded so the prompt stays
    bounded for large exports; headers, types and the total row count are
    always included.
    """

    def __init__(self, sample_rows: int = 50, language: str = "pt-BR") -> None:
        self._sample_rows = max(1, sample_rows)
        self._language = language

    def build_prompt(self, table: Table) -> str:
        """Assemble the full prompt.

        Args:
            table: Typed table produced by CSV ingestion.

        Returns:
            Prompt string ready for an LLM adapter.
        """
        schema = {
            "row_count": len(table.rows),
            "columns": [
                {"name": header, "type": table.types.get(header)}
                for header in table.headers
            ],
        }
        sections = [
            _SYSTEM_INSTRUCTIONS.format(language=self._language),
            self._section("Schema", schema),
            self._section(
                f"Sample rows (first {min(self._sample_rows, len(table.rows))})",
                self._sample(table),
            ),
        ]
        return "\n".join(sections)

    def _sample(self, table: Table) -> List[Dict[str, Any]]:
        return [dict(row.values) for row in table.rows[: self._sample_rows]]

    @staticmethod
    def _section(title: str, data: Any) -> str:
        return _SECTION_TEMPLATE.format(
            title=title,
            data=json.dumps(data, indent=2, ensure_ascii=False, default=str),
        )

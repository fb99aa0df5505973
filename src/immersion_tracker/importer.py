"""Bulk import of flashcards from files."""
import csv
import io
import json
import logging
from pathlib import Path

from immersion_tracker.flashcards import add_flashcard, get_deck

logger = logging.getLogger(__name__)

# Tried in order, so a tab wins over the looser separators.
LINE_SEPARATORS = ("\t", " = ", " - ")


def read_file_content(file_path: str) -> str:
    """Extract plain text from a text-like document."""
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in (".txt", ".md"):
        return path.read_text()
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        reader = PdfReader(file_path)
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    elif suffix == ".docx":
        from docx import Document
        doc = Document(file_path)
        lines = [p.text for p in doc.paragraphs]
        # Two-column tables are a common vocabulary list layout.
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                lines.append("\t".join(cells))
        return "\n".join(lines)
    elif suffix in (".html", ".htm"):
        from bs4 import BeautifulSoup
        soup = BeautifulSoup(path.read_text(), "html.parser")
        lines = []
        for row in soup.find_all("tr"):
            cells = [c.get_text(strip=True) for c in row.find_all("td")]
            lines.append("\t".join(cells))
            row.decompose()
        for term in soup.find_all("dt"):
            definition = term.find_next_sibling("dd")
            if definition is not None:
                lines.append(f"{term.get_text(strip=True)}\t{definition.get_text(strip=True)}")
                definition.decompose()
            term.decompose()
        lines.extend(soup.get_text("\n").splitlines())
        return "\n".join(lines)
    else:
        return path.read_text()


def parse_card_line(line: str) -> dict | None:
    """Split "front<sep>back[<sep>context]" into a card record."""
    line = line.strip().lstrip("-*").strip()
    for sep in LINE_SEPARATORS:
        if sep in line:
            parts = [p.strip() for p in line.split(sep)]
            if len(parts) >= 2 and parts[0] and parts[1]:
                return {
                    "front": parts[0],
                    "back": parts[1],
                    "context": sep.join(parts[2:]).strip(),
                }
            return None
    return None


def _records_from_data(data) -> list:
    if isinstance(data, dict):
        data = data.get("cards", [])
    if not isinstance(data, list):
        return []
    return [r for r in data if isinstance(r, dict)]


def _records_from_rows(rows) -> list:
    records = []
    for i, row in enumerate(rows):
        cells = [c.strip() for c in row]
        if i == 0 and [c.lower() for c in cells[:2]] == ["front", "back"]:
            continue
        records.append({
            "front": cells[0] if len(cells) > 0 else "",
            "back": cells[1] if len(cells) > 1 else "",
            "context": cells[2] if len(cells) > 2 else "",
        })
    return records


def read_card_records(file_path: str) -> list:
    """Return raw card records (dicts with front/back/context) from a file."""
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _records_from_data(json.loads(path.read_text()))
    elif suffix in (".yaml", ".yml"):
        import yaml
        return _records_from_data(yaml.safe_load(path.read_text()))
    elif suffix in (".csv", ".tsv"):
        delimiter = "\t" if suffix == ".tsv" else ","
        return _records_from_rows(csv.reader(io.StringIO(path.read_text()), delimiter=delimiter))

    records = []
    for line in read_file_content(file_path).splitlines():
        if not line.strip():
            continue
        record = parse_card_line(line)
        records.append(record if record else {"front": "", "back": ""})
    return records


def import_file(db_path: str, file_path: str, deck_id: int) -> dict:
    """Add every valid card in a file to a deck. Invalid entries are skipped."""
    get_deck(db_path, deck_id)
    records = read_card_records(file_path)
    imported = skipped = 0
    for record in records:
        front = str(record.get("front") or "").strip()
        back = str(record.get("back") or "").strip()
        if not front or not back:
            skipped += 1
            continue
        add_flashcard(
            db_path, deck_id, front, back,
            context=str(record.get("context") or ""),
            video_title=str(record.get("video_title") or ""),
        )
        imported += 1
    filename = Path(file_path).name
    logger.info("Imported %d cards from %s into deck %s (%d skipped)", imported, filename, deck_id, skipped)
    return {"filename": filename, "imported": imported, "skipped": skipped}

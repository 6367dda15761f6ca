"""
Spreadsheet import/export for staff rosters, question banks and reports.

- The first sheet of an uploaded workbook is read; its first row is the header.
- Rows missing required values are skipped and counted, not rejected.
- Unreadable files raise ValueError.
"""
from io import BytesIO
from typing import Any, Dict, List, Sequence, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter

from staffquiz.model.questions import OPTION_KEYS

STAFF_COLUMNS = ["Employee ID", "Name", "Department"]
QUESTION_COLUMNS = ["Question", "Option A", "Option B", "Option C", "Option D", "Correct Answer"]
DEFAULT_DEPARTMENT = "General"

STAFF_TEMPLATE_ROWS = [
    {"Employee ID": "EMP001", "Name": "John Doe", "Department": "Sales"},
    {"Employee ID": "EMP002", "Name": "Jane Smith", "Department": "Marketing"},
]
QUESTION_TEMPLATE_ROWS = [
    {
        "Question": "What is the capital of France?",
        "Option A": "London",
        "Option B": "Paris",
        "Option C": "Berlin",
        "Option D": "Madrid",
        "Correct Answer": "B",
    },
    {
        "Question": "Which planet is known as the Red Planet?",
        "Option A": "Mars",
        "Option B": "Venus",
        "Option C": "Jupiter",
        "Option D": "Saturn",
        "Correct Answer": "A",
    },
]


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))  # 1001.0 -> "1001"
    return str(value).strip()


def _first(row: Dict[str, str], *keys: str) -> str:
    for key in keys:
        value = row.get(key, "")
        if value:
            return value
    return ""


def read_sheet_rows(content: bytes) -> List[Dict[str, str]]:
    """
    Reads the first sheet of an .xlsx file into header-keyed rows.

    Parameters:
        content (bytes): The uploaded file.

    Returns:
        List[Dict[str, str]]: One dict per non-empty data row.

    Raises:
        ValueError: If the content is not a readable workbook.
    """
    try:
        wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise ValueError(f"Not a readable .xlsx workbook: {type(e).__name__}: {e}") from e

    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            return []
        header = [_cell_text(h) for h in header_row]

        out = []
        for values in rows:
            texts = [_cell_text(v) for v in values]
            if not any(texts):
                continue
            out.append({h: texts[i] if i < len(texts) else "" for i, h in enumerate(header) if h})
        return out
    finally:
        wb.close()


def parse_staff_workbook(content: bytes) -> Tuple[List[Dict[str, str]], int]:
    """
    Returns:
        (staff, skipped) where each staff dict has employee_id, name and department.
    """
    staff = []
    skipped = 0
    for row in read_sheet_rows(content):
        employee_id = _first(row, "Employee ID", "id")
        name = _first(row, "Name", "name")
        if not employee_id or not name:
            skipped += 1
            continue
        staff.append({
            "employee_id": employee_id,
            "name": name,
            "department": _first(row, "Department", "dept") or DEFAULT_DEPARTMENT,
        })
    return staff, skipped


def parse_questions_workbook(content: bytes) -> Tuple[List[Dict[str, Any]], int]:
    """
    Returns:
        (questions, skipped) where each question dict has text, options,
        correct_answer and a 1-based order within the file.
    """
    questions: List[Dict[str, Any]] = []
    skipped = 0
    for row in read_sheet_rows(content):
        text = row.get("Question", "")
        options = {key: row.get(f"Option {key}", "") for key in OPTION_KEYS}
        correct_answer = (row.get("Correct Answer", "") or "A").upper()
        if not text or not options["A"] or correct_answer not in OPTION_KEYS:
            skipped += 1
            continue
        questions.append({
            "text": text,
            "options": options,
            "correct_answer": correct_answer,
            "order": len(questions) + 1,
        })
    return questions, skipped


def build_workbook(rows: Sequence[Dict[str, Any]], columns: Sequence[str], sheet_name: str) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    ws.append(list(columns))
    for row in rows:
        ws.append([row.get(col, "") for col in columns])

    for idx, col in enumerate(columns):
        width = max([len(col)] + [len(str(row.get(col, ""))) for row in rows])
        ws.column_dimensions[get_column_letter(idx + 1)].width = min(width + 2, 60)

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def staff_template() -> bytes:
    return build_workbook(STAFF_TEMPLATE_ROWS, STAFF_COLUMNS, "Staff_Template")


def question_template() -> bytes:
    return build_workbook(QUESTION_TEMPLATE_ROWS, QUESTION_COLUMNS, "Questions_Template")

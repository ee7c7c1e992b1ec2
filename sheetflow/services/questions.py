import logging
import re
from dataclasses import dataclass, field
from typing import List

from sheetflow.config import QUESTION_COLUMNS, TABLE_QUESTIONS, TABLE_TICKETS
from sheetflow.errors import NotFoundError, Result, SheetsError

logger = logging.getLogger(__name__)

QUESTION_TYPES = ["Text", "Textarea", "Select", "Checkbox", "Date", "Url"]
_CHECKBOX = re.compile(r"\(checkbox:\s*(.*?)\)", re.IGNORECASE)


@dataclass
class FormQuestion:
    id: str
    question_text: str
    question_type: str = "Text"
    options: List[str] = field(default_factory=list)


def infer_question_type(header):
    """The question type is encoded in its text, e.g. "Platform (checkbox: Web; iOS)"."""
    lower = header.lower()
    if "(select)" in lower:
        return "Select", []
    if "(checkbox:" in lower:
        match = _CHECKBOX.search(header)
        options = [o.strip() for o in match.group(1).split(";")] if match else []
        return "Checkbox", options
    if "describe" in lower or "detail" in lower:
        return "Textarea", []
    if "date" in lower:
        return "Date", []
    if "url" in lower or "link" in lower:
        return "Url", []
    return "Text", []


def _init_table(adapter):
    return adapter.append_record(TABLE_QUESTIONS, {h: h for h in QUESTION_COLUMNS}, is_header_write=True)


def get_form_questions(adapter, team):
    if not team:
        return []
    grid = adapter.read_table(TABLE_QUESTIONS)
    if not grid or "Team" not in grid[0] or "QuestionText" not in grid[0]:
        _init_table(adapter)
        return []
    team_position = grid[0].index("Team")
    text_position = grid[0].index("QuestionText")
    questions = []
    for row_index, row in enumerate(grid[1:], start=1):
        if row[team_position] != team:
            continue
        text = row[text_position]
        question_type, options = infer_question_type(text)
        questions.append(FormQuestion(f"col-{row_index}", text, question_type, options))
    return questions


def add_form_question(adapter, team, question_text):
    if not team or not question_text:
        return Result.fail("Team and question text cannot be empty.")
    return adapter.append_record(TABLE_QUESTIONS, {"Team": team, "QuestionText": question_text})


def find_question_row(adapter, team, question_text):
    grid = adapter.read_table(TABLE_QUESTIONS)
    if not grid:
        raise NotFoundError(f"{TABLE_QUESTIONS} is empty or not found.")
    if "Team" not in grid[0] or "QuestionText" not in grid[0]:
        raise NotFoundError(f"Required columns (Team, QuestionText) not found in {TABLE_QUESTIONS}.")
    team_position = grid[0].index("Team")
    text_position = grid[0].index("QuestionText")
    for row_index, row in enumerate(grid[1:], start=1):
        if row[team_position] == team and row[text_position] == question_text:
            return row_index
    raise NotFoundError(f'Question "{question_text}" for team "{team}" not found.')


def update_form_question(adapter, team, original_text, new_text):
    if not new_text:
        return Result.fail("New question text cannot be empty.")
    try:
        row_index = find_question_row(adapter, team, original_text)
        position = adapter.find_column_index(TABLE_QUESTIONS, "QuestionText")
    except SheetsError as e:
        logger.error("Error updating form question: %s", e)
        return Result.fail(e)
    return adapter.update_cell_range(TABLE_QUESTIONS, row_index, position, position, [new_text])


def delete_form_question(adapter, team, question_text):
    try:
        row_index = find_question_row(adapter, team, question_text)
    except SheetsError as e:
        logger.error("Error deleting form question: %s", e)
        return Result.fail(e)
    return adapter.delete_row(TABLE_QUESTIONS, row_index)


def build_question_text(text, question_type, options=()):
    """Inverse of infer_question_type for the types that need a marker."""
    text = text.strip()
    if question_type == "Select" and "(select)" not in text.lower():
        return f"{text} (select)"
    if question_type == "Checkbox" and options:
        return f"{text} (checkbox: {'; '.join(o.strip() for o in options if o.strip())})"
    return text


# ticket form fields live as columns of the tickets table

def ticket_fields(adapter):
    return adapter.headers(TABLE_TICKETS)


def add_ticket_field(adapter, name):
    if not name or not name.strip():
        return Result.fail("Field name cannot be empty.")
    try:
        existing = adapter.headers(TABLE_TICKETS)
    except SheetsError as e:
        logger.error("Error adding ticket field: %s", e)
        return Result.fail(e)
    if name.strip() in existing:
        return Result.fail(f'Field "{name}" already exists.')
    return adapter.add_column(TABLE_TICKETS, name.strip())


def rename_ticket_field(adapter, old_name, new_name):
    if not new_name or not new_name.strip():
        return Result.fail("Field name cannot be empty.")
    return adapter.rename_column(TABLE_TICKETS, old_name, new_name.strip())


def delete_ticket_field(adapter, name):
    return adapter.delete_column(TABLE_TICKETS, name)


def question_label(question_text):
    """Display label: the text without its trailing "*" and type marker."""
    label = re.sub(r"\*$", "", question_text.strip())
    return re.sub(r"\s\(.*\)", "", label).strip()


def is_required(question_text):
    return question_text.strip().endswith("*")


def select_options(adapter, question_text):
    """A Select question reads its choices from the tab named after its label, one per cell."""
    grid = adapter.read_table(question_label(question_text))
    return [cell for row in grid for cell in row if cell.strip()]

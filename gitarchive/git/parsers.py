"""
Parsers for the human-readable output of git.

Every literal phrase this tool depends on lives in this module, so a change
in git's wording only has to be followed here.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from ..errors import LogParseError

CLEAN_MARKER = "working tree clean"
PUSH_SECTION_MARKER = "Local refs configured for 'git push':"
UP_TO_DATE_SUFFIX = "(up to date)"

# git prints dates with English names regardless of the user's locale
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass
class StatusSummary:
    """Branch and last summary line of ``git status``."""
    branch: str
    summary: str

    @property
    def is_clean(self) -> bool:
        return CLEAN_MARKER in self.summary


@dataclass
class CommitLogRecord:
    """A single commit as printed by ``git log -1``."""
    commit_id: Optional[str] = None
    author: Optional[str] = None
    date: Optional[datetime] = None
    message: Optional[str] = None


def parse_status(lines: Sequence[str]) -> StatusSummary:
    """Take the branch from the first line and the summary from the last non-blank one."""
    branch = lines[0].split(" ")[-1] if lines else ""
    non_blank = [line for line in lines if line.strip()]
    summary = non_blank[-1] if non_blank else ""
    return StatusSummary(branch=branch, summary=summary)


def parse_log_date(value: str) -> datetime:
    """
    Parse a git default-format date such as ``Mon Oct 5 14:03:22 2026 +0900``.

    Raises:
        LogParseError: if the value does not match the expected layout
    """
    parts = value.split()
    if len(parts) != 6 or parts[0] not in WEEKDAYS or parts[1] not in MONTHS:
        raise LogParseError(f"Unrecognised commit date: {value!r}")

    _, month_name, day, clock, year, offset = parts
    month = MONTHS.index(month_name) + 1
    try:
        return datetime.strptime(f"{year}-{month:02d}-{day} {clock} {offset}", "%Y-%m-%d %H:%M:%S %z")
    except ValueError as e:
        raise LogParseError(f"Unrecognised commit date: {value!r}") from e


def parse_log_one(lines: Sequence[str]) -> CommitLogRecord:
    """
    Parse the output of ``git log -1`` into a CommitLogRecord.

    Header lines carry the commit id and ``Key: value`` pairs; the first blank
    line starts the message body.

    Raises:
        LogParseError: if the date is malformed or the commit id or date is missing
    """
    record = CommitLogRecord()
    body: Optional[List[str]] = None

    for line in lines:
        if body is None:
            if line.startswith("commit"):
                tokens = line.split()
                if len(tokens) < 2:
                    raise LogParseError(f"Commit line without id: {line!r}")
                record.commit_id = tokens[1]
            elif not line.strip():
                body = []
            else:
                index = line.find(":")
                if index > 0:
                    key = line[:index]
                    value = line[index + 1:].strip()
                    if key == "Author":
                        record.author = value
                    elif key == "Date":
                        record.date = parse_log_date(value)
        elif line.strip():
            body.append(line.strip())

    if body is not None:
        record.message = "\n".join(body)

    if record.commit_id is None or record.date is None:
        raise LogParseError("git log output has no commit id or date")
    return record


def parse_remote_divergence(lines: Sequence[str]) -> List[str]:
    """Return the push-section lines of ``git remote show`` that are not up to date."""
    divergent = []
    in_push_section = False
    for line in lines:
        if not in_push_section:
            in_push_section = PUSH_SECTION_MARKER in line
            continue
        if line.strip() and not line.rstrip().endswith(UP_TO_DATE_SUFFIX):
            divergent.append(line.strip())
    return divergent


def parse_name_list(lines: Sequence[str]) -> List[str]:
    """One tag or remote name per line, blank lines dropped."""
    return [line.strip() for line in lines if line.strip()]


def parse_head_commit(lines: Sequence[str]) -> str:
    """
    Commit id from the first line of ``git log -1 <branch>``.

    Raises:
        LogParseError: if there is no such line or it has no id
    """
    tokens = lines[0].split() if lines else []
    if len(tokens) < 2:
        raise LogParseError("git log output has no commit line")
    return tokens[1]

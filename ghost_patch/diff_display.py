"""
Diff display — render suggestions as colored unified diffs and review them
group by group before anything is written.

Includes a Textual-based interactive reviewer where the user can step
through the groups, dismiss the ones they do not want and accept the rest.
"""

from __future__ import annotations

import logging

from .editing.hunk_differ import compute_hunks, format_hunks
from .editing.suggestions import OperationGroup, SuggestionFile

logger = logging.getLogger(__name__)


def compute_diff(filepath: str, old_content: str, new_content: str,
                 context_lines: int = 3) -> str | None:
    """Return unified diff text, or None if the content is unchanged."""
    hunks = compute_hunks(old_content, new_content, context_lines)
    if not hunks:
        return None
    return format_hunks(hunks, fromfile=f"a/{filepath}", tofile=f"b/{filepath}")


# Styles per diff line kind: (ANSI escape, Rich style)
_LINE_STYLES = {
    "file": ("\033[1m", "bold"),
    "hunk": ("\033[36m", "cyan"),
    "add": ("\033[32m", "green"),
    "delete": ("\033[31m", "red"),
}


def _line_kind(line: str) -> str | None:
    """Classify one line of a unified diff or of a group listing."""
    if line.startswith(("+++ ", "--- ")):
        return "file"
    # Group listings prefix their header with a selection marker
    if line.lstrip("* ").startswith("@@"):
        return "hunk"
    if line.startswith("+"):
        return "add"
    if line.startswith("-"):
        return "delete"
    return None


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string."""
    out: list[str] = []
    for line in diff_text.splitlines():
        kind = _line_kind(line)
        out.append(line if kind is None else f"{_LINE_STYLES[kind][0]}{line}\033[0m")
    return "\n".join(out)


def format_group(group: OperationGroup, index: int) -> str:
    """Describe one group: header plus its operations with 1-based lines."""
    header = (f"@@ group {index + 1} [{group.kind.value}] "
              f"lines {group.start_line + 1}-{group.end_line + 1} @@")
    body = [f"{op.kind.value}{op.line + 1:>5} | {op.content}" for op in group]
    return "\n".join([header, *body])


def format_groups(suggestion_file: SuggestionFile) -> str:
    parts: list[str] = []
    for index, group in enumerate(suggestion_file.groups):
        marker = "*" if index == suggestion_file.selected_group_index else " "
        parts.append(f"{marker} {format_group(group, index)}")
    return "\n".join(parts)


# ══════════════════════════════════════════════════════════════════
#  Interactive group review — Textual TUI
# ══════════════════════════════════════════════════════════════════

def review_groups(suggestion_file: SuggestionFile, interactive: bool = True) -> bool:
    """Let the user dismiss groups, then approve or reject the remainder.

    Dismissed groups are removed from *suggestion_file*. Returns ``True``
    if the remaining operations were approved.
    """
    if not suggestion_file.has_operations():
        return False

    if not interactive:
        logger.info("[Review] Auto-approving %d group(s)", len(suggestion_file.groups))
        return True

    return _textual_group_review(suggestion_file)


def _format_rich_diff(diff_text: str) -> str:
    """Same classification as :func:`format_colored_diff`, as Rich markup."""
    out: list[str] = []
    for line in diff_text.splitlines():
        kind = _line_kind(line)
        # Opening brackets would otherwise be read as markup tags
        text = line.replace("[", "\\[")
        if kind is None:
            out.append(text)
        else:
            style = _LINE_STYLES[kind][1]
            out.append(f"[{style}]{text}[/{style}]")
    return "\n".join(out)


def _textual_group_review(suggestion_file: SuggestionFile) -> bool:
    """Launch a Textual app to navigate, dismiss and approve groups."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import VerticalScroll
    from textual.widgets import Footer, Static

    class GroupReviewApp(App):
        """Step through suggestion groups with approve/reject."""

        CSS = """
        #title-bar {
            dock: top;
            height: 3;
            background: #1a1a2e;
            color: #e94560;
            text-align: center;
            padding: 1;
            text-style: bold;
        }
        #groups {
            height: 1fr;
            margin: 1 2;
            border: round #444;
            padding: 1;
        }
        """

        BINDINGS = [
            Binding("n", "next_group", "Next"),
            Binding("p", "previous_group", "Previous"),
            Binding("d", "dismiss_group", "Dismiss"),
            Binding("a", "approve", "Approve"),
            Binding("escape", "reject", "Reject"),
        ]

        def __init__(self, target: SuggestionFile) -> None:
            super().__init__()
            self._target = target
            self._approved = False

        def compose(self) -> ComposeResult:
            yield Static(f" ━━  {self._target.uri}  ━━ ", id="title-bar")
            with VerticalScroll(id="groups"):
                yield Static(self._render_groups(), id="group-list")
            yield Footer()

        def _render_groups(self) -> str:
            if not self._target.groups:
                return "(all groups dismissed)"
            return _format_rich_diff(format_groups(self._target))

        def _refresh(self) -> None:
            self.query_one("#group-list", Static).update(self._render_groups())

        def action_next_group(self) -> None:
            self._target.select_next_group()
            self._refresh()

        def action_previous_group(self) -> None:
            self._target.select_previous_group()
            self._refresh()

        def action_dismiss_group(self) -> None:
            if self._target.dismiss_selected_group() is not None:
                self._target.select_first_group()
            self._refresh()

        def action_approve(self) -> None:
            self._approved = self._target.has_operations()
            self.exit()

        def action_reject(self) -> None:
            self._approved = False
            self.exit()

    app = GroupReviewApp(suggestion_file)
    app.run()
    return app._approved

from __future__ import annotations

import re
from typing import Optional

from ..domain.ordered_set import OrderedSet
from ..ports import VersionControlPort

HUNK_HEADER_RE = re.compile(r"^@@ -\d+(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


class DiffAnalyzer:
    """Domain service that extracts added line numbers from unified diffs.

    Line numbers refer to the post-image (the fixed version of the file) and
    are 1-based.
    """

    def __init__(self, *, vcs: Optional[VersionControlPort] = None) -> None:
        self._vcs = vcs

    def added_lines(self, diff_text: str) -> OrderedSet[int]:
        """Return the post-image line numbers added by a single-file diff.

        Each hunk body is read for exactly the old/new line counts its header
        announces, so content such as ``+++i;`` is never taken for a file
        header. Context lines advance the post-image counter; removals do not.
        Lines outside a hunk body are ignored.
        """
        added: OrderedSet[int] = OrderedSet()
        counter = 0
        old_left = new_left = 0

        for line in diff_text.splitlines():
            if old_left <= 0 and new_left <= 0:
                header = HUNK_HEADER_RE.match(line)
                if header:
                    old_count, start, new_count = header.groups()
                    old_left = int(old_count) if old_count is not None else 1
                    new_left = int(new_count) if new_count is not None else 1
                    counter = int(start)
                continue

            if line.startswith("\\"):
                # "\ No newline at end of file"
                continue
            if line.startswith("+"):
                added.add(counter)
                counter += 1
                new_left -= 1
            elif line.startswith("-"):
                old_left -= 1
            else:
                counter += 1
                old_left -= 1
                new_left -= 1

        return added

    def changed_lines(self, *, commit: str, parent: str, path: str) -> OrderedSet[int]:
        """Diff one file between parent and commit and return its added lines."""
        if self._vcs is None:
            raise RuntimeError("DiffAnalyzer was created without a version control port")
        diff_text = self._vcs.diff(parent, commit, path)
        return self.added_lines(diff_text)

"""Patch text fixtures.

Patches are in the shape the GitHub pull request files API returns: hunks
only, starting at the first ``@@`` header.
"""

from __future__ import annotations

import pytest

#: One hunk: context, removed, two added, context
SIMPLE_PATCH = """\
@@ -1,3 +1,4 @@
 context line
-removed line
+added line 1
+added line 2
 context line 2"""

#: Two hunks; the second header takes up position 5
MULTI_HUNK_PATCH = """\
@@ -1,3 +1,3 @@
 import os
-import sys
+import json
 
@@ -20,3 +20,4 @@ def main():
     load()
+    validate()
     run()
     return 0"""

#: Added line at the end of a file without a trailing newline
NO_NEWLINE_PATCH = """\
@@ -1,2 +1,2 @@
 first
-second
\\ No newline at end of file
+second!
\\ No newline at end of file"""

#: Two files as produced by ``git diff``
GIT_DIFF = """\
diff --git a/src/auth/login.py b/src/auth/login.py
index 1111111..2222222 100644
--- a/src/auth/login.py
+++ b/src/auth/login.py
@@ -1,2 +1,3 @@
 def login(user):
+    check(user)
     return True
diff --git a/README.md b/README.md
index 3333333..4444444 100644
--- a/README.md
+++ b/README.md
@@ -1 +1 @@
-Old title
+New title
"""


@pytest.fixture
def simple_patch() -> str:
    return SIMPLE_PATCH


@pytest.fixture
def multi_hunk_patch() -> str:
    return MULTI_HUNK_PATCH


@pytest.fixture
def git_diff() -> str:
    return GIT_DIFF

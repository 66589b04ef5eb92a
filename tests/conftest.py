"""Shared test fixtures for depscope."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from depscope.models import SourceFile

INDEX_JS = """\
import App from './app';
const _ = require('lodash');
import fs from 'fs';

App.start(fs);
"""

APP_JS = """\
import { helper } from './utils/helper';
import React from 'react';

export default class App {}
"""

HELPER_JS = """\
import '../missing';

export function helper() {
  return 42;
}
"""

ORPHAN_JS = """\
// Not imported by anything.
const value = 1;
"""


@pytest.fixture()
def sample_sources() -> list[SourceFile]:
    """A small JavaScript project: a chain of three files and an orphan."""
    return [
        SourceFile(path="src/index.js", language="javascript", content=INDEX_JS),
        SourceFile(path="src/app.js", language="javascript", content=APP_JS),
        SourceFile(
            path="src/utils/helper.js", language="javascript", content=HELPER_JS
        ),
        SourceFile(path="src/orphan.js", language="javascript", content=ORPHAN_JS),
    ]


@pytest.fixture()
def sample_manifest() -> dict[str, Any]:
    """A package.json-style manifest for sample_sources."""
    return {
        "name": "demo",
        "version": "1.0.0",
        "dependencies": {
            "react": "^18.2.0",
            "lodash": "^4.17.21",
            "left-pad": "^1.3.0",
        },
        "devDependencies": {"jest": "^29.0.0"},
    }


@pytest.fixture()
def sample_repo(tmp_path: Path) -> Path:
    """Write a small JavaScript project with a package.json to disk."""
    src = tmp_path / "src"
    (src / "utils").mkdir(parents=True)
    (src / "index.js").write_text(INDEX_JS, encoding="utf-8")
    (src / "app.js").write_text(APP_JS, encoding="utf-8")
    (src / "utils" / "helper.js").write_text(
        "export function helper() {\n  return 42;\n}\n", encoding="utf-8"
    )
    (src / "orphan.js").write_text(ORPHAN_JS, encoding="utf-8")
    (tmp_path / "package.json").write_text(
        json.dumps(
            {
                "name": "demo",
                "dependencies": {"react": "^18.2.0", "lodash": "^4.17.21"},
                "devDependencies": {"left-pad": "^1.3.0"},
            }
        ),
        encoding="utf-8",
    )
    return tmp_path

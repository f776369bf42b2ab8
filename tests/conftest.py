"""
Shared fixtures for license check tests.
"""

from pathlib import Path
from typing import Dict, Optional

import pytest

MIT_TEXT = '''MIT License

Copyright (c) 2019 Example Authors

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT.
'''

APACHE_TEXT = '''
                                 Apache License
                           Version 2.0, January 2004
                        http://www.apache.org/licenses/

   TERMS AND CONDITIONS FOR USE, REPRODUCTION, AND DISTRIBUTION

   1. Definitions.
'''

GPL3_TEXT = '''                    GNU GENERAL PUBLIC LICENSE
                       Version 3, 29 June 2007

 Copyright (C) 2007 Free Software Foundation, Inc. <https://fsf.org/>

                            Preamble

  The GNU General Public License is a free, copyleft license for
software and other kinds of works.
'''

BSD3_TEXT = '''Copyright (c) 2020, Example

Redistribution and use in source and binary forms, with or without
modification, are permitted provided that the following conditions are met:

3. Neither the name of the copyright holder nor the names of its
   contributors may be used to endorse or promote products derived from
   this software without specific prior written permission.

THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
AND ANY EXPRESS OR IMPLIED WARRANTIES ARE DISCLAIMED.
'''

NOT_A_LICENSE = "This project has no idea what a license is.\n"


def write_tree(root: Path, entries: Dict[str, Optional[str]]) -> Path:
    """
    Create files and directories under ``root``.

    Keys ending in '/' are directories; every other key is a file whose
    value is its text.
    """
    for rel, content in entries.items():
        path = root / rel
        if rel.endswith("/"):
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content or "", encoding="utf-8")
    return root


@pytest.fixture
def vendor_dir(tmp_path: Path) -> Path:
    """An empty vendor directory inside a temporary project."""
    vendor = tmp_path / "vendor"
    vendor.mkdir()
    return vendor


@pytest.fixture
def tree():
    return write_tree


@pytest.fixture
def mit_text() -> str:
    return MIT_TEXT


@pytest.fixture
def apache_text() -> str:
    return APACHE_TEXT


@pytest.fixture
def gpl3_text() -> str:
    return GPL3_TEXT


@pytest.fixture
def bsd3_text() -> str:
    return BSD3_TEXT

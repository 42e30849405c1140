"""Quality gate tests.

The PII gate must pass over the shipped sources and catch the patterns it
exists for.
"""

import os
import sys
from pathlib import Path

# Make scripts importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from scripts.gate_security_pii import check_file, main  # noqa: E402

SRC = Path(__file__).resolve().parent.parent / "src"


class TestPiiGate:
    def test_sources_pass(self):
        assert main(SRC) == 0

    def test_print_flagged(self, tmp_path):
        module = tmp_path / "mod.py"
        module.write_text('print("hello")\n', encoding="utf-8")

        errors = check_file(module)

        assert len(errors) == 1
        assert "print()" in errors[0]

    def test_unredacted_contact_flagged(self, tmp_path):
        module = tmp_path / "mod.py"
        module.write_text('logger.info("booked", extra={"email": contact.email})\n', encoding="utf-8")

        assert check_file(module)

    def test_redacted_contact_allowed(self, tmp_path):
        module = tmp_path / "mod.py"
        module.write_text(
            'logger.info("booked", extra={"extra_fields": safe_log_context(email=contact.email)})\n',
            encoding="utf-8",
        )

        assert check_file(module) == []

    def test_comments_ignored(self, tmp_path):
        module = tmp_path / "mod.py"
        module.write_text("# print(contact)\n", encoding="utf-8")

        assert check_file(module) == []

    def test_missing_src_dir(self, tmp_path):
        assert main(tmp_path / "missing") == 1

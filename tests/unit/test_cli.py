"""
CLI Tests

Runs chunkseal_cli.main.main() in-process against a JSON store and a
file-backed local ledger in a temporary directory.
"""
import json
import os

import pytest

from chunkseal_cli.commands.seal import load_chunks
from chunkseal_cli.main import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    main,
)
from core.crypto.hashing import hash_text_hex
from fixtures.common import make_texts


@pytest.fixture
def workspace(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("CHUNKSEAL_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("CHUNKSEAL_STORAGE_BACKEND", "json")
    monkeypatch.setenv("CHUNKSEAL_STORAGE_PATH", str(tmp_path / "store.json"))
    monkeypatch.setenv("CHUNKSEAL_LEDGER_PATH", str(tmp_path / "ledger.json"))
    return tmp_path


@pytest.fixture
def chunks_file(workspace):
    path = workspace / "chunks.json"
    path.write_text(json.dumps(make_texts(4)))
    return path


def run_json(capsys, *argv):
    code = main(list(argv))
    out = capsys.readouterr().out
    return code, json.loads(out) if out.strip().startswith("{") else out


def seal_document(capsys, chunks_file, document_id="doc-cli"):
    code, summary = run_json(capsys, "seal", str(chunks_file), "--document-id", document_id, "--json")
    assert code == EXIT_SUCCESS
    return summary


class TestLoadChunks:
    """Tests for reading chunk input files."""

    def test_json_list(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text(json.dumps(["a", "b"]))
        assert load_chunks(path) == ["a", "b"]

    def test_json_must_be_list_of_strings(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_text(json.dumps({"chunks": ["a"]}))
        with pytest.raises(ValueError):
            load_chunks(path)

    def test_text_split_on_blank_lines(self, tmp_path):
        path = tmp_path / "c.txt"
        path.write_text("First paragraph\nstill first.\n\n  \nSecond.\n\n\nThird.\n")
        assert load_chunks(path) == ["First paragraph\nstill first.", "Second.", "Third."]


class TestSealAndVerify:
    """Seal -> verify -> tamper -> verify -> restore round trip."""

    def test_seal_outputs_summary(self, capsys, chunks_file):
        summary = seal_document(capsys, chunks_file)
        assert summary["document_id"] == "doc-cli"
        assert summary["chunk_count"] == 4
        assert summary["tree_depth"] == 3
        assert summary["already_anchored"] is False

    def test_reseal_reports_existing_anchor(self, capsys, chunks_file):
        first = seal_document(capsys, chunks_file, "doc-1")
        second = seal_document(capsys, chunks_file, "doc-2")
        assert second["already_anchored"] is True
        assert second["tx_ref"] == first["tx_ref"]

    def test_verify_tamper_restore(self, capsys, chunks_file):
        seal_document(capsys, chunks_file)

        code, report = run_json(capsys, "verify", "doc-cli", "--json")
        assert code == EXIT_SUCCESS
        assert report["all_verified"] is True

        assert main(["tamper", "doc-cli-0002"]) == EXIT_SUCCESS
        capsys.readouterr()

        code, report = run_json(capsys, "verify", "doc-cli", "--json")
        assert code == EXIT_VERIFICATION_FAILED
        failed = [c for c in report["chunks"] if not c["verified"]]
        assert [c["chunk_id"] for c in failed] == ["doc-cli-0002"]
        assert failed[0]["failed_layer"] == "hash"

        code, status = run_json(capsys, "status", "doc-cli", "--json")
        assert code == EXIT_SUCCESS
        assert status["tampered_count"] == 1

        assert main(["tamper", "doc-cli-0002"]) == EXIT_RUNTIME_ERROR
        assert main(["restore", "doc-cli-0002"]) == EXIT_SUCCESS
        capsys.readouterr()

        code, report = run_json(capsys, "verify", "doc-cli", "--json")
        assert code == EXIT_SUCCESS

    def test_verify_selected_chunk(self, capsys, chunks_file):
        seal_document(capsys, chunks_file)
        code, report = run_json(capsys, "verify", "doc-cli", "--chunk", "1", "--json", "--debug")
        assert code == EXIT_SUCCESS
        assert [c["chunk_id"] for c in report["chunks"]] == ["doc-cli-0001"]
        assert report["chunks"][0]["stages"][-1] == "verified"

    def test_verify_unknown_document(self, capsys, workspace):
        assert main(["verify", "nope"]) == EXIT_RUNTIME_ERROR

    def test_seal_missing_file(self, capsys, workspace):
        assert main(["seal", str(workspace / "missing.json")]) == EXIT_RUNTIME_ERROR

    def test_seal_empty_document(self, capsys, workspace):
        path = workspace / "empty.json"
        path.write_text("[]")
        assert main(["seal", str(path)]) == EXIT_RUNTIME_ERROR
        assert "EMPTY_INPUT" in capsys.readouterr().err


class TestLookup:
    """Tests for the lookup command."""

    def test_anchored_root(self, capsys, chunks_file):
        summary = seal_document(capsys, chunks_file)
        code, result = run_json(capsys, "lookup", summary["merkle_root"], "--json")
        assert code == EXIT_SUCCESS
        assert result["exists"] is True
        assert result["document_id"] == "doc-cli"
        assert result["tx_ref"] == summary["tx_ref"]

    def test_unknown_root(self, capsys, workspace):
        code, result = run_json(capsys, "lookup", hash_text_hex("never sealed"), "--json")
        assert code == EXIT_VERIFICATION_FAILED
        assert result["exists"] is False

    def test_malformed_root(self, capsys, workspace):
        assert main(["lookup", "xyz"]) == EXIT_RUNTIME_ERROR


class TestConfigCommand:
    """Tests for the config command."""

    def test_init_then_refuse_overwrite(self, capsys, workspace):
        assert main(["config", "--init"]) == EXIT_SUCCESS
        assert (workspace / "chunkseal.json").exists()
        assert main(["config", "--init"]) == EXIT_RUNTIME_ERROR

    def test_show(self, capsys, workspace):
        code, shown = run_json(capsys, "config", "--show")
        assert code == EXIT_SUCCESS
        assert shown["storage"]["backend"] == "json"

    def test_no_command(self, capsys, workspace):
        assert main([]) == EXIT_RUNTIME_ERROR

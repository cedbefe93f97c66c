"""
CLI Unit Tests
Tests for ordmerkle_cli/main.py and ordmerkle_cli/commands/*
"""
import json

import pytest

from fixtures import make_tree
from ordmerkle.crypto.hashing import to_hex
from ordmerkle_cli.items import ItemFileError, load_items, parse_item
from ordmerkle_cli.main import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    create_parser,
    main,
)

ITEMS = ["alpha", "beta", "gamma", "delta", "epsilon"]


@pytest.fixture(autouse=True)
def _workdir(tmp_path, monkeypatch):
    """Run every CLI test in an empty directory so no config file is found."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def items_file(tmp_path):
    path = tmp_path / "items.txt"
    path.write_text("\n".join(ITEMS) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def proof_file(tmp_path, items_file):
    path = tmp_path / "proof.json"
    assert main(["prove", str(items_file), "--index", "2", "--out", str(path)]) == EXIT_SUCCESS
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_no_command(self, capsys):
        assert main([]) == EXIT_RUNTIME_ERROR

    def test_prove_requires_target(self, items_file):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["prove", str(items_file)])

    def test_prove_target_exclusive(self, items_file):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["prove", str(items_file), "--index", "0", "--item", "a"])

    def test_global_options(self):
        args = create_parser().parse_args(["--hash", "blake2b", "--format", "jsonl", "root", "x"])
        assert (args.hash_algorithm, args.item_format) == ("blake2b", "jsonl")


class TestRootCommand:
    """Tests for `ordmerkle root`."""

    def test_json_output(self, items_file, capsys):
        assert main(["root", str(items_file), "--json"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data == {
            "hash_algorithm": "sha256",
            "leaf_count": 5,
            "height": 3,
            "root": to_hex(make_tree(ITEMS).root_digest()),
        }

    def test_human_output(self, items_file, capsys):
        assert main(["root", str(items_file)]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert f"root:      {to_hex(make_tree(ITEMS).root_digest())}" in out
        assert "leaves:    5" in out

    def test_hash_option(self, items_file, capsys):
        assert main(["--hash", "blake2b", "root", str(items_file), "--json"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["hash_algorithm"] == "blake2b"
        assert data["root"] == to_hex(make_tree(ITEMS, hasher="blake2b").root_digest())

    def test_jsonl_format(self, tmp_path, capsys):
        path = tmp_path / "items.jsonl"
        path.write_text('{"id": 1}\n\n[1, 2]\n"x"\n', encoding="utf-8")
        assert main(["--format", "jsonl", "root", str(path), "--json"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["root"] == to_hex(make_tree([{"id": 1}, [1, 2], "x"]).root_digest())

    def test_output_format_from_env(self, items_file, capsys, monkeypatch):
        monkeypatch.setenv("ORDMERKLE_OUTPUT_FORMAT", "json")
        assert main(["root", str(items_file)]) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["leaf_count"] == 5

    def test_config_file_hash(self, tmp_path, items_file, capsys):
        config = tmp_path / "cfg.json"
        config.write_text(json.dumps({"hash_algorithm": "sha512"}))
        assert main(["--config", str(config), "root", str(items_file), "--json"]) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["hash_algorithm"] == "sha512"

    def test_empty_file(self, tmp_path, capsys):
        path = tmp_path / "empty.txt"
        path.write_text("")
        assert main(["root", str(path)]) == EXIT_RUNTIME_ERROR
        assert "no leaves" in capsys.readouterr().err

    def test_empty_file_json_error(self, tmp_path, capsys):
        path = tmp_path / "empty.txt"
        path.write_text("")
        assert main(["root", str(path), "--json"]) == EXIT_RUNTIME_ERROR
        assert json.loads(capsys.readouterr().out)["code"] == "EMPTY_TREE"

    def test_missing_file(self, capsys):
        assert main(["root", "missing.txt"]) == EXIT_RUNTIME_ERROR
        assert "Items file not found" in capsys.readouterr().err

    def test_unknown_hash(self, items_file, capsys):
        assert main(["--hash", "nope", "root", str(items_file)]) == EXIT_RUNTIME_ERROR
        assert "Unknown hash algorithm" in capsys.readouterr().err

    def test_bad_config(self, tmp_path, items_file, capsys):
        config = tmp_path / "cfg.json"
        config.write_text(json.dumps({"colour": "blue"}))
        assert main(["--config", str(config), "root", str(items_file)]) == EXIT_RUNTIME_ERROR
        assert "Error loading configuration" in capsys.readouterr().err


class TestProveAndVerify:
    """Tests for `ordmerkle prove` and `ordmerkle verify`."""

    def test_prove_to_stdout(self, items_file, capsys):
        assert main(["prove", str(items_file), "--item", "delta"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["leaf_index"] == 3
        assert data["item"] == "delta"
        assert data["leaf_count"] == 5

    def test_prove_missing_item(self, items_file, capsys):
        assert main(["prove", str(items_file), "--item", "omega"]) == EXIT_RUNTIME_ERROR
        assert "not found" in capsys.readouterr().err

    def test_prove_index_out_of_range(self, items_file, capsys):
        assert main(["prove", str(items_file), "--index", "5"]) == EXIT_RUNTIME_ERROR
        assert "out of range" in capsys.readouterr().err

    def test_verify_self_consistent(self, proof_file, capsys):
        assert main(["verify", str(proof_file)]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "✓ valid: leaf 2 of 5" in out
        assert "--root" in out

    def test_verify_trusted_root(self, proof_file, capsys):
        root = to_hex(make_tree(ITEMS).root_digest())
        assert main(["verify", str(proof_file), "--root", root, "--json"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["valid"] is True
        assert data["trusted_root"] is True

    def test_verify_wrong_root(self, proof_file, capsys):
        root = to_hex(make_tree(ITEMS + ["zeta"]).root_digest())
        assert main(["verify", str(proof_file), "--root", root]) == EXIT_VERIFICATION_FAILED
        assert "✗ INVALID" in capsys.readouterr().out

    def test_verify_tampered(self, proof_file, capsys):
        data = json.loads(proof_file.read_text())
        data["item"] = "GAMMA"
        proof_file.write_text(json.dumps(data))
        assert main(["verify", str(proof_file), "--json"]) == EXIT_VERIFICATION_FAILED
        assert json.loads(capsys.readouterr().out)["valid"] is False

    def test_verify_bad_root_hex(self, proof_file, capsys):
        assert main(["verify", str(proof_file), "--root", "abc"]) == EXIT_RUNTIME_ERROR
        assert "Invalid --root" in capsys.readouterr().err

    def test_verify_missing_proof(self, capsys):
        assert main(["verify", "missing.json"]) == EXIT_RUNTIME_ERROR
        assert "Proof not found" in capsys.readouterr().err

    def test_verify_malformed_proof(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{}")
        assert main(["verify", str(path), "--json"]) == EXIT_RUNTIME_ERROR
        assert json.loads(capsys.readouterr().out)["code"] == "PROOF_FORMAT_INVALID"


class TestShowAndConfig:
    """Tests for `ordmerkle show` and `ordmerkle config`."""

    def test_show(self, items_file, capsys):
        assert main(["show", str(items_file), "--digest-chars", "6"]) == EXIT_SUCCESS
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("[0, 5) 0x")
        assert any(line.endswith("final") for line in lines)
        assert sum("#" in line for line in lines) == 5

    def test_config_init(self, tmp_path, capsys):
        assert main(["config", "--init"]) == EXIT_SUCCESS
        assert json.loads((tmp_path / "ordmerkle.json").read_text())["hash_algorithm"] == "sha256"
        assert main(["config", "--init"]) == EXIT_RUNTIME_ERROR

    def test_config_show(self, capsys, monkeypatch):
        monkeypatch.setenv("ORDMERKLE_HASH_ALGORITHM", "sha512")
        assert main(["config", "--show"]) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["hash_algorithm"] == "sha512"


class TestItemLoading:
    """Tests for ordmerkle_cli/items.py."""

    def test_lines_keep_blank_lines(self, tmp_path):
        path = tmp_path / "items.txt"
        path.write_text("a\n\nb\n")
        assert load_items(path, "lines") == ["a", "", "b"]

    def test_jsonl_error_has_line_number(self, tmp_path):
        path = tmp_path / "items.jsonl"
        path.write_text('1\n{oops\n')
        with pytest.raises(ItemFileError, match=r"items.jsonl:2"):
            load_items(path, "jsonl")

    def test_parse_item(self):
        assert parse_item("42", "jsonl") == 42
        assert parse_item("42", "lines") == "42"
        with pytest.raises(ItemFileError):
            parse_item("{", "jsonl")

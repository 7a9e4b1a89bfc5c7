"""
CLI Unit Tests
Tests for sumtree_cli (build / prove / verify / config)

Tests run main([...]) in a temporary working directory so no user
configuration file is picked up.
"""
import json

import pytest

from sumtree_cli.main import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    create_parser,
    main,
)


LEAVES = [
    {"label": "alice", "amount": 5},
    {"label": "bob", "amount": 3},
    {"label": "carol", "amount": 7},
    {"label": "dave", "amount": 1},
    {"label": "erin", "amount": 4},
]


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def leaves_file(workdir):
    path = workdir / "leaves.json"
    path.write_text(json.dumps(LEAVES))
    return path


@pytest.fixture
def built(leaves_file, workdir, capsys):
    """Output directory produced by `sumtree build --out`."""
    out = workdir / "out"
    assert main(["build", str(leaves_file), "--out", str(out)]) == EXIT_SUCCESS
    capsys.readouterr()
    return out


class TestParser:
    """Tests for argument parsing."""

    def test_no_command_is_error(self, workdir, capsys):
        assert main([]) == EXIT_RUNTIME_ERROR

    def test_prove_index_is_int(self):
        args = create_parser().parse_args(["prove", "leaves.json", "3"])
        assert args.index == 3


class TestBuild:
    """Tests for `sumtree build`."""

    def test_human_summary(self, leaves_file, capsys):
        assert main(["build", str(leaves_file)]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "leaf_count: 5" in out
        assert "padded_leaf_count: 8" in out
        assert "depth: 3" in out
        assert "total_amount: 20" in out

    def test_json_summary(self, leaves_file, capsys):
        assert main(["build", str(leaves_file), "--json"]) == EXIT_SUCCESS

        summary = json.loads(capsys.readouterr().out)
        assert summary["root"]["amount"] == 20
        assert summary["hash_algorithm"] == "sha256"
        assert summary["proofs_written"] == 0

    def test_writes_root_and_proofs(self, built):
        root = json.loads((built / "root.json").read_text())

        assert root["leaf_count"] == 5
        assert root["root"]["amount"] == 20
        assert sorted(p.name for p in (built / "proofs").iterdir()) == [
            f"{i}.json" for i in range(5)
        ]

    def test_csv_input(self, workdir, capsys):
        path = workdir / "leaves.csv"
        path.write_text("label,amount\nalice,5\nbob,3\n")

        assert main(["build", str(path), "--json"]) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["root"]["amount"] == 8

    def test_empty_input(self, workdir, capsys):
        path = workdir / "empty.json"
        path.write_text("[]")

        assert main(["build", str(path)]) == EXIT_RUNTIME_ERROR
        assert "zero leaves" in capsys.readouterr().err

    def test_missing_input(self, workdir):
        assert main(["build", str(workdir / "missing.json")]) == EXIT_RUNTIME_ERROR

    def test_hash_from_env(self, leaves_file, monkeypatch, capsys):
        monkeypatch.setenv("SUMTREE_HASH_ALGORITHM", "blake2b_256")

        assert main(["build", str(leaves_file), "--json"]) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["hash_algorithm"] == "blake2b_256"


class TestProve:
    """Tests for `sumtree prove`."""

    def test_prints_bundle(self, leaves_file, capsys):
        assert main(["prove", str(leaves_file), "2"]) == EXIT_SUCCESS

        bundle = json.loads(capsys.readouterr().out)
        assert bundle["leaf_index"] == 2
        assert bundle["leaf"]["amount"] == 7
        assert len(bundle["steps"]) == 3

    def test_writes_file(self, leaves_file, workdir, capsys):
        out = workdir / "proof.json"

        assert main(["prove", str(leaves_file), "1", "--out", str(out)]) == EXIT_SUCCESS
        assert json.loads(out.read_text())["leaf_index"] == 1

    @pytest.mark.parametrize("index", ["5", "7", "-1"])
    def test_index_out_of_range(self, leaves_file, capsys, index):
        """Padding slots have no proofs."""
        assert main(["prove", str(leaves_file), index]) == EXIT_RUNTIME_ERROR


class TestVerify:
    """Tests for `sumtree verify`."""

    @pytest.mark.parametrize(
        "index,interval",
        [(0, "[0, 5)"), (1, "[5, 8)"), (2, "[8, 15)"), (3, "[15, 16)"), (4, "[16, 20)")],
    )
    def test_accepts_every_leaf(self, built, capsys, index, interval):
        code = main(["verify", str(built / "root.json"), str(built / "proofs" / f"{index}.json")])

        out = capsys.readouterr().out
        assert code == EXIT_SUCCESS
        assert "accepted: true" in out
        assert f"interval: {interval}" in out

    def test_json_result(self, built, capsys):
        code = main(
            ["verify", str(built / "root.json"), str(built / "proofs" / "1.json"), "--json"]
        )

        assert code == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out) == {
            "accepted": True,
            "index": 1,
            "interval": [5, 8],
        }

    def test_tampered_proof_rejected(self, built, capsys):
        proof_path = built / "proofs" / "2.json"
        data = json.loads(proof_path.read_text())
        data["steps"][0]["sibling"]["amount"] += 1
        proof_path.write_text(json.dumps(data))

        code = main(["verify", str(built / "root.json"), str(proof_path)])

        assert code == EXIT_VERIFICATION_FAILED
        assert "PROOF_MISMATCH" in capsys.readouterr().out

    def test_inflated_leaf_rejected(self, built, capsys):
        """Raising the leaf amount no longer matches the shipped label."""
        proof_path = built / "proofs" / "0.json"
        data = json.loads(proof_path.read_text())
        data["leaf"]["amount"] = 50
        proof_path.write_text(json.dumps(data))

        assert main(["verify", str(built / "root.json"), str(proof_path)]) == (
            EXIT_VERIFICATION_FAILED
        )

    def test_proof_against_other_root(self, built, workdir, capsys):
        other = workdir / "other.json"
        other.write_text(json.dumps(LEAVES[:4]))
        other_out = workdir / "other_out"
        assert main(["build", str(other), "--out", str(other_out)]) == EXIT_SUCCESS

        code = main(["verify", str(other_out / "root.json"), str(built / "proofs" / "0.json")])

        assert code == EXIT_VERIFICATION_FAILED
        assert "MALFORMED_PROOF" in capsys.readouterr().out

    def test_unsupported_version(self, built, capsys):
        root_path = built / "root.json"
        data = json.loads(root_path.read_text())
        data["schema_version"] = "v2"
        root_path.write_text(json.dumps(data))

        code = main(["verify", str(root_path), str(built / "proofs" / "0.json")])

        assert code == EXIT_RUNTIME_ERROR

    def test_missing_file(self, built, workdir):
        code = main(["verify", str(built / "root.json"), str(workdir / "nope.json")])
        assert code == EXIT_RUNTIME_ERROR


class TestConfigCommand:
    """Tests for `sumtree config`."""

    def test_init_then_show(self, workdir, capsys):
        assert main(["config", "--init"]) == EXIT_SUCCESS
        assert (workdir / "sumtree.yaml").exists()
        capsys.readouterr()

        assert main(["config", "--show"]) == EXIT_SUCCESS
        shown = json.loads(capsys.readouterr().out)
        assert shown["hash"]["algorithm"] == "sha256"
        assert shown["default_output_format"] == "human"

    def test_init_refuses_overwrite(self, workdir):
        (workdir / "sumtree.yaml").write_text("hash:\n  algorithm: sha256\n")
        assert main(["config", "--init"]) == EXIT_RUNTIME_ERROR

    def test_config_file_is_used(self, leaves_file, workdir, capsys):
        (workdir / "sumtree.yaml").write_text(
            "hash:\n  algorithm: sha3_256\ndefault_output_format: json\n"
        )

        assert main(["build", str(leaves_file)]) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["hash_algorithm"] == "sha3_256"

    def test_bad_config_file(self, leaves_file, workdir, capsys):
        (workdir / "sumtree.yaml").write_text("hash:\n  algorithm: md5\n")

        assert main(["build", str(leaves_file)]) == EXIT_RUNTIME_ERROR
        assert "Error loading configuration" in capsys.readouterr().err

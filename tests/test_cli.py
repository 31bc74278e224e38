# tests/test_cli.py
import json

import pytest

from epistat.cli import build_parser, main


def _run(capsys, *argv):
    main(list(argv))
    return json.loads(capsys.readouterr().out)


def test_proportion_command(capsys):
    out = _run(capsys, "proportion", "45", "100")
    assert out["p_hat"] == pytest.approx(0.45)
    assert set(out) >= {"wald", "wilson", "wilson_cc", "clopper_pearson"}
    assert out["wilson"]["lower"] == pytest.approx(0.3561, abs=1e-3)


def test_poisson_command(capsys):
    out = _run(capsys, "poisson", "5", "1000", "--conf", "95")
    assert out["rate"] == pytest.approx(0.005)
    assert out["exact"]["upper"] == pytest.approx(0.01167, abs=1e-4)


def test_table_command(capsys):
    out = _run(capsys, "table", "20", "80", "10", "90", "--yates")
    assert out["risk_ratio"]["value"] == pytest.approx(2.0)
    assert out["odds_ratio"]["value"] == pytest.approx(2.25)
    assert out["risk_difference"]["nnt"] == 10
    assert out["chi_square"]["yates"] is True
    assert out["ztest"]["risk_difference"] == pytest.approx(0.10)


def test_undefined_results_are_json_safe(capsys):
    out = _run(capsys, "variance", "1.0", "1")
    assert out["variance"]["value"] is None
    assert out["variance"]["defined"] is False

    out = _run(capsys, "table", "10", "90", "20", "180")
    assert out["risk_difference"]["nnt"] == "inf"


def test_sample_size_command_with_cluster(capsys):
    out = _run(
        capsys,
        "sample-size", "proportions", "--p1", "0.3", "--p2", "0.5",
        "--cluster-size", "10", "--icc", "0.05",
    )
    assert out["sample_size"]["n"] == 93
    assert out["sample_size"]["n_total"] == 186
    assert out["cluster"]["n_adjusted"] == 270
    assert out["cluster"]["n_clusters"] == 27


def test_sample_size_noninferiority_defaults_to_one_sided(capsys):
    out = _run(capsys, "sample-size", "noninferiority", "--p1", "0.85", "--p2", "0.85", "--margin", "0.1")
    assert out["sample_size"]["n"] == 201


def test_power_command(capsys):
    out = _run(capsys, "--log-level", "DEBUG", "power", "means",
               "--n1", "63", "--n2", "63", "--m1", "0", "--m2", "5", "--sd", "10")
    assert 0.8 <= out["power"] <= 1.0


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])

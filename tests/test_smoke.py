import logging

from topos_engine import smoke


def test_smoke_acceptance_passes(caplog):
    with caplog.at_level(logging.INFO):
        assert smoke.main() == 0
    assert "topos_engine smoke: PASS" in caplog.text


def test_acceptance_report():
    report = smoke._run_acceptance()
    assert report["char"] == {1: "true", 2: "false"}
    assert report["truth_tags"] == ["MONO", "REGULAR_MONO", "SPLIT_MONO"]
    assert report["m_regular"] is True
    assert report["swap_inverse"] == {1: 2, 2: 1}
    assert report["exp_size"] == 4
    assert report["curried"] == 16
    assert report["direct_image_of_m"] == ["c0"]

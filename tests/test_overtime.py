from pointage.services.overtime import classify_overtime, normalize_contract_base


def _brackets(b):
    return [(x.label, x.hours, x.rate, x.multiplied_hours) for x in b.brackets]


def test_base35_under_legal_hours():
    b = classify_overtime(30, 35)
    assert b.regular_hours == 30
    assert b.structural_hours == 0
    assert b.brackets == []
    assert b.total_overtime == 0


def test_base35_two_brackets():
    # 45h : 8h à 25% (35→43) puis 2h à 50%
    b = classify_overtime(45, 35)
    assert b.regular_hours == 35
    assert _brackets(b) == [("25%", 8, 1.25, 10.0), ("50%", 2, 1.50, 3.0)]
    assert b.total_overtime == 10
    assert b.contract_base == 35


def test_base35_exactly_at_bracket_boundary():
    b = classify_overtime(43, 35)
    assert _brackets(b) == [("25%", 8, 1.25, 10.0)]


def test_base39_structural_then_overtime():
    # 41h : 35 normales, 4 structurelles, 2h sup. à 25% au-delà de 39h
    b = classify_overtime(41, 39)
    assert b.regular_hours == 35
    assert b.structural_hours == 4
    assert _brackets(b) == [("25%", 2, 1.25, 2.5)]
    assert b.total_overtime == 2


def test_base39_partial_structural():
    b = classify_overtime(37.5, 39)
    assert b.regular_hours == 35
    assert b.structural_hours == 2.5
    assert b.brackets == []
    assert b.total_overtime == 0


def test_base39_brackets_anchored_on_39():
    b = classify_overtime(50, 39)
    assert _brackets(b) == [("25%", 4, 1.25, 5.0), ("50%", 7, 1.50, 10.5)]
    assert b.total_overtime == 11


def test_part_time_bases_use_35h_regime():
    b = classify_overtime(40, 24)
    assert b.regular_hours == 35
    assert _brackets(b) == [("25%", 5, 1.25, 6.25)]
    assert b.contract_base == 24


def test_unusable_contract_base_defaults_to_35():
    assert normalize_contract_base(None) == 35
    assert normalize_contract_base("abc") == 35
    assert normalize_contract_base("39") == 39


def test_zero_and_garbage_hours():
    assert classify_overtime(0, 35).regular_hours == 0
    assert classify_overtime(None, 39).structural_hours == 0

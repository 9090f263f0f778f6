from condex import Event, Guard, IntegerType, Machine, extract_conditions, to_text


def test_extract_single_guard() -> None:
    m = Machine(
        "M",
        (Event("evt", (Guard("grd1", "x ≠ y ⇒ y ≠ x"),)),),
        variables={"x": IntegerType(), "y": IntegerType()},
    )
    conditions = extract_conditions(m)
    assert [to_text(c.predicate) for c in conditions["evt"]] == ["x≠y"]


if __name__ == "__main__":
    test_extract_single_guard()
    print("Basic test passed!")

from dailyquiz.render import choice_letter


def test_choice_letters_fall_back_to_numbers():
    assert [choice_letter(i) for i in range(4)] == ["A", "B", "C", "D"]
    assert choice_letter(25) == "Z"
    assert choice_letter(26) == "27"

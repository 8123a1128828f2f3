import json


def test_parser_defaults():
    m = load_module()
    ap = m.build_arg_parser()
    args = ap.parse_args(["--clock-pin", "17", "--data-pin", "18"])
    assert args.chip == 0
    assert args.clock_pin == 17
    assert args.data_pin == 18
    assert args.switch_pin is None
    assert args.bias == "none"
    assert args.poll_interval == 0.1
    assert args.verbose is False
    assert args.json is False
    assert m.check_pins(args) == []


def test_missing_pins_are_reported():
    m = load_module()
    args = m.build_arg_parser().parse_args(["--data-pin", "18"])
    assert m.check_pins(args) == ["--clock-pin is required"]


def test_zero_and_duplicate_pins_are_rejected():
    m = load_module()
    ap = m.build_arg_parser()

    args = ap.parse_args(["--clock-pin", "0", "--data-pin", "18"])
    assert m.check_pins(args) == ["--clock-pin must be a positive GPIO line number (got 0)"]

    args = ap.parse_args(["--clock-pin", "17", "--data-pin", "18", "--switch-pin", "17"])
    assert m.check_pins(args) == ["--switch-pin uses line 17, already used by --clock-pin"]


def test_bias_mapping():
    m = load_module()
    assert m.bias_to_pull_up("none") is None
    assert m.bias_to_pull_up("pull-up") is True
    assert m.bias_to_pull_up("pull-down") is False


def test_toml_config_fills_defaults_and_cli_wins(tmp_path):
    m = load_module()
    cfg = tmp_path / "rotary.toml"
    cfg.write_text(
        "[gpio]\n"
        "chip = 4\n"
        "clock_pin = 5\n"
        "data_pin = 6\n"
        "switch_pin = 13\n"
        "bias = \"pull-up\"\n"
        "[logging]\n"
        "json = true\n"
    )

    _, args = m.parse_args(["--config", str(cfg), "--data-pin", "26"])

    assert args.chip == 4
    assert args.clock_pin == 5
    assert args.data_pin == 26
    assert args.switch_pin == 13
    assert args.bias == "pull-up"
    assert args.json is True
    assert m.resolved_config_dict(args)["gpio"] == {
        "chip": 4,
        "clock_pin": 5,
        "data_pin": 26,
        "switch_pin": 13,
        "bias": "pull-up",
    }


def test_main_without_args_prints_help(capsys):
    m = load_module()
    assert m.main([]) == 0
    assert "--clock-pin" in capsys.readouterr().out


def test_main_rejects_missing_pins(capsys):
    m = load_module()
    assert m.main(["--data-pin", "18"]) == 1
    err = capsys.readouterr().err
    assert "ERROR: --clock-pin is required" in err
    assert "usage:" in err


def test_main_print_config_does_not_touch_gpio(capsys):
    m = load_module()
    assert m.main(["--print-config", "--clock-pin", "17", "--data-pin", "18"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["gpio"]["clock_pin"] == 17
    assert out["monitor"]["poll_interval"] == 0.1


def test_main_version(capsys):
    m = load_module()
    assert m.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == m.VERSION


def test_main_print_config_reports_bias_and_doctor_duration(capsys):
    m = load_module()
    argv = ["--print-config", "--clock-pin", "17", "--data-pin", "18", "--bias", "pull-down", "--doctor-duration", "3"]
    assert m.main(argv) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["gpio"]["bias"] == "pull-down"
    assert out["doctor"]["duration"] == 3.0


def test_toml_doctor_duration(tmp_path):
    m = load_module()
    cfg = tmp_path / "rotary.toml"
    cfg.write_text("[doctor]\nduration = 2.5\n")
    _, args = m.parse_args(["--config", str(cfg), "--clock-pin", "17", "--data-pin", "18"])
    assert args.doctor_duration == 2.5

from site_press.cli import cli

cli(prog_name="site_press")

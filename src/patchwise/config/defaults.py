"""Starter .patchwise.toml template."""

DEFAULT_TOML = """\
# patchwise configuration
version = "1.0"

[apply]
fuzz_threshold = 0        # report patches that needed more approximation than this
fail_on_fuzz = false      # refuse to write when the threshold is exceeded
encoding = "utf-8"
allow_absolute_paths = false

[output]
format = "terminal"       # terminal | json
show_summary = true
"""

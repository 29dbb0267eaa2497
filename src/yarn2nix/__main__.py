from __future__ import annotations

from yarn2nix.main import run

run()

"""
Shared fixtures: fake JDK / df tools built on the running interpreter

Each fake is a tiny Python script; its command line goes into the matching
HEAPGUARD_<TOOL> env var so the CLI runs without a JDK.
"""

import shlex
import sys
from pathlib import Path
from typing import Callable

import pytest

from heapguard.config import TOOL_ENV

JSTAT_HEADER = "S0C    S1C    S0U    S1U      EC       EU        OC         OU       PC     PU    YGC     YGCT    FGC    FGCT     GCT"
DF_HEADER = "Filesystem     1K-blocks     Used Available Use% Mounted on"


@pytest.fixture
def fake_tool(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[[str, str], Path]:
    """
    Install a fake tool: fake_tool("jps", "<python source>")
    """
    bin_dir = tmp_path / "fakebin"
    bin_dir.mkdir(exist_ok=True)

    def _install(name: str, source: str) -> Path:
        script = bin_dir / f"fake_{name}.py"
        script.write_text(source, encoding="utf-8")
        monkeypatch.setenv(TOOL_ENV[name], shlex.join([sys.executable, str(script)]))
        return script

    return _install


@pytest.fixture
def jvm_tools(fake_tool) -> Callable[..., None]:
    """
    Install jps, jstat, df, jmap and gzip fakes for one scenario
    """

    def _install(
        *,
        pid: int,
        used: tuple[int, int, int, int, int] = (0, 0, 100000, 390000, 10000),
        free_kb: int = 10_000_000,
        jps_name: str | None = "Bootstrap",
        jmap_status: int = 0,
        jstat_row: str | None = None,
    ) -> None:
        jps_rows = ["1 Jps"]
        if jps_name is not None:
            jps_rows.append(f"{pid} {jps_name}")
        fake_tool("jps", f"print({chr(10).join(jps_rows)!r})\n")

        s0u, s1u, eu, ou, pu = used
        row = jstat_row or f"1024.0 1024.0 {s0u} {s1u} 8192.0 {eu} 20480.0 {ou} 21248.0 {pu} 12 0.101 1 0.050 0.151"
        fake_tool("jstat", f"print({JSTAT_HEADER!r})\nprint({row!r})\n")

        df_row = f"/dev/sda1 20000000 10000000 {free_kb} 50% /"
        fake_tool("df", f"print({DF_HEADER!r})\nprint({df_row!r})\n")

        fake_tool(
            "jmap",
            "import sys\n"
            "path = sys.argv[1].split('file=', 1)[1]\n"
            f"if {jmap_status}:\n"
            "    print('attach failed')\n"
            f"    sys.exit({jmap_status})\n"
            "open(path, 'wb').write(b'JAVA PROFILE 1.0.2')\n"
            "print('Heap dump file created')\n",
        )
        fake_tool("gzip", "import sys\n")

    return _install

import pytest

CPU_PRESSURE = "some avg10=0.00 avg60=0.00 avg300=0.00 total=5000000\n"
MEMORY_PRESSURE = (
    "some avg10=1.50 avg60=0.75 avg300=0.20 total=2500000\n"
    "full avg10=0.50 avg60=0.25 avg300=0.10 total=1250000\n"
)
IO_PRESSURE = (
    "some avg10=3.00 avg60=2.00 avg300=1.00 total=7000000\n"
    "full avg10=2.00 avg60=1.00 avg300=0.50 total=3500000\n"
)


@pytest.fixture
def make_procfs(tmp_path):
    """Build a fake procfs tree; pass None for a resource to leave its file out."""
    def _make(cpu=CPU_PRESSURE, memory=MEMORY_PRESSURE, io=IO_PRESSURE):
        root = tmp_path / "proc"
        pressure = root / "pressure"
        pressure.mkdir(parents=True, exist_ok=True)
        for name, content in (("cpu", cpu), ("memory", memory), ("io", io)):
            path = pressure / name
            if content is None:
                if path.exists():
                    path.unlink()
            else:
                path.write_text(content)
        return root
    return _make


@pytest.fixture
def procfs(make_procfs):
    return make_procfs()

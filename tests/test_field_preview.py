import matplotlib

matplotlib.use("Agg")

from ductbank.thermal import solve_field  # noqa: E402
from ductbank.thermal.field_preview import save_field_preview  # noqa: E402


def test_field_preview_writes_png(tmp_path, single_conduit_snapshot):
    result = solve_field(single_conduit_snapshot)
    path = save_field_preview(
        result,
        tmp_path / "previews" / "field.png",
        snapshot=single_conduit_snapshot,
        title="single conduit",
    )
    assert path.exists()
    assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

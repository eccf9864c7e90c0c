import numpy as np
import pytest

from wavspa.render.framebuffer import FrameBuffer
from wavspa.render.quantize import IntensityQuantizer, QuantizationPolicy


def _luma_buffer(block_count: int, width: int, **kwargs) -> FrameBuffer:
    quantizer = IntensityQuantizer(QuantizationPolicy.LUMINANCE_SCALE, luminance=1.0)
    return FrameBuffer(block_count, width, quantizer=quantizer, **kwargs)


def test_dimensions_include_margins_and_column_step() -> None:
    fb = FrameBuffer(10, 4, column_step=3, margin_x=50, margin_y=30)
    assert fb.width == 50 + 10 * 3
    assert fb.height == 4 + 30
    for col in range(10):
        fb.put_column(col, np.zeros((4, 3), dtype=np.uint8))
    assert len(fb.serialize()) == fb.width * fb.height * 3


def test_serialize_requires_every_column() -> None:
    fb = _luma_buffer(3, 2)
    with pytest.raises(ValueError):
        fb.serialize()
    fb.draw_power(0, [0.0, 0.0])
    fb.draw_power(1, [0.0, 0.0])
    with pytest.raises(ValueError):
        fb.serialize()
    fb.draw_power(2, [0.0, 0.0])
    assert len(fb.serialize()) == 3 * 2 * 3


def test_column_is_stored_high_frequency_first() -> None:
    fb = _luma_buffer(2, 3)
    fb.draw_power(0, [1.0, 2.0, 3.0])
    assert fb.buf[0, 0].tolist() == [1, 3, 1]
    assert fb.buf[1, 0].tolist() == [0, 2, 1]
    assert fb.buf[2, 0].tolist() == [0, 1, 0]


def test_column_step_replicates_block() -> None:
    fb = _luma_buffer(2, 2, column_step=4, margin_x=5)
    fb.draw_power(0, [90.0, 30.0])
    block = fb.buf[:2, 5:9]
    assert np.all(block == block[:, :1])
    assert fb.buf[:, :5].sum() == 0
    assert fb.buf[:, 9:].sum() == 0


@pytest.mark.parametrize("column", [-1, 3])
def test_put_column_rejects_out_of_range(column: int) -> None:
    fb = _luma_buffer(3, 2)
    with pytest.raises(ValueError):
        fb.draw_power(column, [0.0, 0.0])


def test_put_column_rejects_out_of_order_and_repeat_writes() -> None:
    fb = _luma_buffer(3, 2)
    fb.draw_power(1, [0.0, 0.0])
    with pytest.raises(ValueError):
        fb.draw_power(0, [0.0, 0.0])
    with pytest.raises(ValueError):
        fb.draw_power(1, [0.0, 0.0])
    assert not fb.filled
    fb.draw_power(2, [0.0, 0.0])
    assert fb.filled


def test_put_column_may_skip_ahead() -> None:
    fb = _luma_buffer(3, 1)
    fb.draw_power(0, [60.0])
    fb.draw_power(2, [90.0])
    assert fb.buf[0, 1].tolist() == [0, 0, 0]
    assert fb.buf[0, 2].tolist() == [30, 90, 45]


def test_put_column_rejects_wrong_length() -> None:
    fb = _luma_buffer(1, 3)
    with pytest.raises(ValueError):
        fb.draw_power(0, [1.0, 2.0])


def test_legacy_quantizers_follow_transform_kind() -> None:
    fb = FrameBuffer(2, 1)
    fb.draw_power(0, [10.0])
    fb.draw_amplitude(1, [-10.0])
    assert fb.buf[0, 0].tolist() == [11, 35, 17]
    assert fb.buf[0, 1].tolist() == [85, 255, 127]


def test_draw_hline_adds_saturating_red_across_full_width() -> None:
    fb = _luma_buffer(4, 20, margin_x=8)
    fb.draw_power(0, [100.0] * 20)
    fb.draw_hline(15, "")
    row = fb.buf[15]
    assert row[0].tolist() == [255, 0, 0]
    assert row[8].tolist() == [255, 100, 50]
    with pytest.raises(ValueError):
        fb.draw_hline(20, "")


def test_draw_vline_adds_blue_tint_down_full_height() -> None:
    fb = _luma_buffer(4, 6, margin_x=2, margin_y=30)
    fb.draw_vline(1, "")
    col = fb.buf[:, 3]
    assert np.all(col == np.array([0x40, 0x40, 0xFF], dtype=np.uint8))
    assert fb.buf[:, 2].sum() == 0


def test_draw_vline_lands_on_first_replicated_pixel_column() -> None:
    fb = _luma_buffer(4, 6, column_step=3, margin_x=2)
    fb.draw_vline(2, "")
    assert np.all(fb.buf[:, 2 + 2 * 3] == np.array([0x40, 0x40, 0xFF], dtype=np.uint8))
    assert fb.buf[:, 2 + 2 * 3 - 1].sum() == 0
    assert fb.buf[:, 2 + 2 * 3 + 1].sum() == 0


def test_labels_are_clipped_to_image() -> None:
    fb = _luma_buffer(2, 12, margin_x=50)
    fb.draw_hline(11, "440Hz")
    label = fb.buf[0:10, 4:34]
    assert label.any()
    assert set(map(tuple, label[label.any(axis=-1)].tolist())) == {(255, 0, 0)}
    # label would start above the top edge
    fb.draw_hline(3, "880Hz")
    assert fb.buf.shape == (12, 52, 3)


def test_constructor_rejects_degenerate_geometry() -> None:
    with pytest.raises(ValueError):
        FrameBuffer(0, 4)
    with pytest.raises(ValueError):
        FrameBuffer(4, 0)
    with pytest.raises(ValueError):
        FrameBuffer(4, 4, column_step=0)

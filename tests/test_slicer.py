import unittest

from models.errors import ValidationError
from services.slicer import Slice, slice_image


class TestSliceImage(unittest.TestCase):
    def test_short_image_is_one_full_slice(self):
        self.assertEqual(slice_image(1000, 1200), [Slice(x=0, y=0, w=1000, h=1200)])

    def test_image_exactly_slice_height_is_one_slice(self):
        self.assertEqual(slice_image(800, 1800), [Slice(x=0, y=0, w=800, h=1800)])

    def test_tall_image_with_custom_slicing(self):
        slices = slice_image(1000, 12000, slice_height=2000, overlap_ratio=0.15)

        self.assertGreater(len(slices), 1)
        self.assertEqual(slices[0].h, 2000)
        self.assertLess(slices[-1].y, 12000)

    def test_tall_image_strips_step_and_reach_bottom(self):
        for height in (1801, 3600, 5000, 12345):
            slices = slice_image(720, height)
            step = 1800 - 270
            self.assertEqual(slices[-1].y + slices[-1].h, height)
            for current, following in zip(slices, slices[1:]):
                self.assertEqual(current.h, 1800)
                self.assertEqual(following.y - current.y, step)
            for item in slices:
                self.assertGreater(item.h, 0)
                self.assertEqual((item.x, item.w), (0, 720))

    def test_tiny_step_still_terminates(self):
        slices = slice_image(10, 5, slice_height=2, overlap_ratio=0.99)
        self.assertEqual(slices[-1].y + slices[-1].h, 5)
        self.assertEqual([item.y for item in slices], [0, 1, 2, 3])

    def test_same_input_gives_same_slices(self):
        self.assertEqual(slice_image(1000, 9000), slice_image(1000, 9000))

    def test_invalid_input_raises(self):
        with self.assertRaises(ValidationError):
            slice_image(0, 100)
        with self.assertRaises(ValidationError):
            slice_image(100, -1)
        with self.assertRaises(ValidationError):
            slice_image(100, 100, slice_height=0)
        with self.assertRaises(ValidationError):
            slice_image(100, 100, overlap_ratio=1.0)

    def test_to_dict(self):
        self.assertEqual(Slice(0, 10, 20, 30).to_dict(), {"x": 0, "y": 10, "w": 20, "h": 30})


if __name__ == "__main__":
    unittest.main()

# Copyright 2024 dicomengine authors. See LICENSE file for details.
"""Tests for dicomengine.pixel_data_handlers.util."""

import numpy
import pytest

from dicomengine.dataset import Dataset, FileMetaDataset
from dicomengine.pixel_data_handlers.util import (
    apply_modality_lut, apply_windowing, convert_color_space,
    get_expected_length, get_nr_frames, pixel_dtype, reshape_pixel_array,
    transfer_syntax_of, unpack_bits, window_from_dataset
)
from dicomengine.uid import (
    ExplicitVRLittleEndian, ExplicitVRBigEndian, ImplicitVRLittleEndian,
    RLELossless, JPEGBaseline8Bit
)


def image_dataset(rows=2, columns=2, samples=1, frames=1, bits=8):
    ds = Dataset()
    ds.SamplesPerPixel = samples
    if frames > 1:
        ds.NumberOfFrames = frames
    ds.Rows = rows
    ds.Columns = columns
    ds.BitsAllocated = bits
    ds.PixelRepresentation = 0
    return ds


class TestTransferSyntaxOf:
    """Tests for transfer_syntax_of()"""
    def test_file_meta(self):
        """Test the file meta transfer syntax is used"""
        ds = Dataset()
        ds.file_meta = FileMetaDataset()
        ds.file_meta.TransferSyntaxUID = RLELossless
        assert transfer_syntax_of(ds) == RLELossless

    def test_encoding(self):
        """Test the encoding attributes are used without file meta"""
        ds = Dataset()
        assert transfer_syntax_of(ds) == ExplicitVRLittleEndian
        ds.is_implicit_VR = True
        ds.is_little_endian = True
        assert transfer_syntax_of(ds) == ImplicitVRLittleEndian
        ds.is_implicit_VR = False
        ds.is_little_endian = False
        assert transfer_syntax_of(ds) == ExplicitVRBigEndian


class TestPixelDtype:
    """Tests for pixel_dtype()"""
    @pytest.mark.parametrize(
        'bits, pixel_repr, dtype',
        [(1, 0, 'uint8'), (8, 0, 'uint8'), (8, 1, 'int8'),
         (16, 0, 'uint16'), (16, 1, 'int16'), (32, 1, 'int32')]
    )
    def test_dtypes(self, bits, pixel_repr, dtype):
        """Test the dtype for the bits allocated and representation"""
        ds = image_dataset(bits=bits)
        ds.PixelRepresentation = pixel_repr
        assert pixel_dtype(ds) == numpy.dtype(dtype)

    def test_float(self):
        """Test float dtypes"""
        ds = image_dataset(bits=32)
        assert pixel_dtype(ds, as_float=True) == numpy.float32
        ds.BitsAllocated = 16
        with pytest.raises(ValueError, match=r"Float pixel data"):
            pixel_dtype(ds, as_float=True)

    def test_invalid(self):
        """Test invalid element values raise"""
        ds = image_dataset(bits=12)
        with pytest.raises(ValueError, match=r"Bits Allocated"):
            pixel_dtype(ds)

        ds = image_dataset()
        ds.PixelRepresentation = 2
        with pytest.raises(ValueError, match=r"Pixel Representation"):
            pixel_dtype(ds)


class TestLengthAndReshape:
    """Tests for get_expected_length() and reshape_pixel_array()"""
    def test_expected_length(self):
        """Test the expected length in bytes and pixels"""
        ds = image_dataset(rows=3, columns=3, bits=16, frames=2)
        assert get_nr_frames(ds) == 2
        assert get_expected_length(ds, 'pixels') == 18
        assert get_expected_length(ds) == 36

        ds = image_dataset(rows=3, columns=3, bits=1)
        assert get_expected_length(ds) == 2

    def test_frames(self):
        """Test the number of frames defaults to 1"""
        ds = image_dataset()
        assert get_nr_frames(ds) == 1
        ds.NumberOfFrames = 0
        assert get_nr_frames(ds) == 1

    def test_reshape_single(self):
        """Test reshaping single frame data"""
        ds = image_dataset(rows=2, columns=3)
        arr = reshape_pixel_array(ds, numpy.arange(6))
        assert arr.shape == (2, 3)

        ds = image_dataset(rows=2, columns=3, frames=2)
        arr = reshape_pixel_array(ds, numpy.arange(12))
        assert arr.shape == (2, 2, 3)

    def test_reshape_planar(self):
        """Test reshaping multi-sample data"""
        ds = image_dataset(rows=1, columns=2, samples=3)
        ds.PlanarConfiguration = 0
        arr = reshape_pixel_array(ds, numpy.arange(6))
        assert arr.tolist() == [[[0, 1, 2], [3, 4, 5]]]

        ds.PlanarConfiguration = 1
        arr = reshape_pixel_array(ds, numpy.arange(6))
        assert arr.tolist() == [[[0, 2, 4], [1, 3, 5]]]

        # JPEG is always interleaved
        ds.file_meta = FileMetaDataset()
        ds.file_meta.TransferSyntaxUID = JPEGBaseline8Bit
        arr = reshape_pixel_array(ds, numpy.arange(6))
        assert arr.tolist() == [[[0, 1, 2], [3, 4, 5]]]

    def test_reshape_invalid(self):
        """Test invalid samples and planar configuration raise"""
        ds = image_dataset(samples=0)
        with pytest.raises(ValueError, match=r"Samples per Pixel"):
            reshape_pixel_array(ds, numpy.arange(4))

        ds = image_dataset(rows=1, columns=2, samples=3)
        ds.PlanarConfiguration = 2
        with pytest.raises(ValueError, match=r"Planar"):
            reshape_pixel_array(ds, numpy.arange(6))

    def test_unpack_bits(self):
        """Test bits are unpacked least significant first"""
        assert unpack_bits(b'\x05').tolist() == [1, 0, 1, 0, 0, 0, 0, 0]


class TestModalityLUT:
    """Tests for apply_modality_lut()"""
    def test_rescale(self):
        """Test the rescale operation"""
        ds = Dataset()
        ds.RescaleSlope = 2
        ds.RescaleIntercept = -10
        arr = apply_modality_lut(numpy.array([0, 5, 10]), ds)
        assert arr.dtype == numpy.float64
        assert arr.tolist() == [-10, 0, 10]

    def test_no_rescale(self):
        """Test the array is unchanged without a modality LUT"""
        arr = numpy.array([1, 2, 3])
        assert apply_modality_lut(arr, Dataset()) is arr

    def test_lut_sequence(self):
        """Test a modality LUT sequence is applied"""
        item = Dataset()
        item.LUTDescriptor = [4, 1, 8]
        item.LUTData = [10, 20, 30, 40]
        ds = Dataset()
        ds.ModalityLUTSequence = [item]
        arr = apply_modality_lut(numpy.array([0, 1, 2, 4, 9]), ds)
        assert arr.tolist() == [10, 10, 20, 40, 40]
        assert arr.dtype == numpy.uint8


class TestWindowing:
    """Tests for apply_windowing()"""
    def test_identity(self):
        """Test a window of 128/256 leaves 8-bit values unchanged"""
        arr = numpy.arange(256)
        out = apply_windowing(arr, 128, 256)
        assert numpy.allclose(out, arr)

    def test_clamped(self):
        """Test values outside the window are clamped"""
        arr = numpy.array([-1000, 0, 95, 100, 105, 1000])
        out = apply_windowing(arr, 100, 10)
        assert out[0] == 0
        assert out[1] == 0
        assert out[2] == 0
        assert 0 < out[3] < 255
        assert out[4] == 255
        assert out[5] == 255

    def test_output_range(self):
        """Test a custom output range"""
        out = apply_windowing(numpy.array([0, 255]), 128, 256, y_max=1)
        assert out.tolist() == [0, 1]

    def test_linear_exact_and_sigmoid(self):
        """Test the other VOI LUT functions"""
        out = apply_windowing(numpy.array([0, 50, 100]), 50, 100,
                              voi_func='LINEAR_EXACT')
        assert out.tolist() == [0, 127.5, 255]

        out = apply_windowing(numpy.array([50]), 50, 100, voi_func='SIGMOID')
        assert out.tolist() == [127.5]

    def test_invalid(self):
        """Test invalid widths and functions raise"""
        arr = numpy.array([0])
        with pytest.raises(ValueError, match=r"greater than or equal to 1"):
            apply_windowing(arr, 0, 0.5)
        with pytest.raises(ValueError, match=r"greater than 0"):
            apply_windowing(arr, 0, 0, voi_func='LINEAR_EXACT')
        with pytest.raises(ValueError, match=r"greater than 0"):
            apply_windowing(arr, 0, 0, voi_func='SIGMOID')
        with pytest.raises(ValueError, match=r"Unsupported VOI LUT"):
            apply_windowing(arr, 0, 1, voi_func='CUBIC')

    def test_window_from_dataset(self):
        """Test getting the window from the VOI LUT module"""
        ds = Dataset()
        assert window_from_dataset(ds) is None
        ds.WindowCenter = [40, 50]
        ds.WindowWidth = [400, 500]
        assert window_from_dataset(ds) == (40.0, 400.0)
        ds.WindowWidth = 350
        assert window_from_dataset(ds) == (40.0, 350.0)


class TestColorSpace:
    """Tests for convert_color_space()"""
    def test_round_trip(self):
        """Test RGB to YBR_FULL and back"""
        arr = numpy.array([[[255, 0, 0], [0, 255, 0]]], dtype='u1')
        ybr = convert_color_space(arr, 'RGB', 'YBR_FULL')
        assert ybr[0, 0].tolist() == [76, 85, 255]
        rgb = convert_color_space(ybr, 'YBR_FULL', 'RGB')
        assert numpy.abs(rgb.astype(int) - arr).max() <= 2

    def test_unchanged(self):
        """Test no conversion between the same color space"""
        arr = numpy.zeros((1, 1, 3), dtype='u1')
        assert convert_color_space(arr, 'RGB', 'RGB') is arr

    def test_invalid(self):
        """Test invalid conversions raise"""
        with pytest.raises(ValueError, match=r"must be 'uint8'"):
            convert_color_space(numpy.zeros((1, 1, 3)), 'RGB', 'YBR_FULL')
        arr = numpy.zeros((1, 1, 3), dtype='u1')
        with pytest.raises(NotImplementedError, match=r"not supported"):
            convert_color_space(arr, 'RGB', 'CMYK')

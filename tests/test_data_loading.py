import numpy as np
import pandas as pd
import pytest

from moodgp_pkg.config import PREDICTOR_COLUMNS
from moodgp_pkg.config import RESPONSE_COLUMNS
from moodgp_pkg.types import DatasetError
from moodgp_pkg.utils.data_loading import crop_missing_leading
from moodgp_pkg.utils.data_loading import load_dataset
from moodgp_pkg.utils.data_loading import split_variables


def test_load_dataset_semicolon_delimited(diary_csv, diary):
    df = load_dataset(diary_csv)
    assert len(df) == len(diary)
    for column in RESPONSE_COLUMNS + PREDICTOR_COLUMNS:
        assert column in df.columns
    assert df["exercise"].isna().sum() == 10


def test_load_dataset_strips_column_names(tmp_path, diary):
    path = tmp_path / "padded.csv"
    diary.rename(columns={"happiness": " happiness "}).to_csv(path, sep=";", index=False)
    df = load_dataset(str(path))
    assert "happiness" in df.columns


def test_load_dataset_non_numeric_cells_become_nan(tmp_path, diary):
    diary = diary.astype(object)
    diary.loc[3, "meditation"] = "n/a"
    path = tmp_path / "dirty.csv"
    diary.to_csv(path, sep=";", index=False)
    df = load_dataset(str(path))
    assert np.isnan(df.loc[3, "meditation"])


def test_load_dataset_missing_file():
    with pytest.raises(DatasetError, match="File not found"):
        load_dataset("/nonexistent/moodsData.csv")


def test_load_dataset_non_utf8_file(tmp_path):
    path = tmp_path / "latin1.csv"
    path.write_bytes(b"happiness;humeur\n5;tr\xe8s bien\n")
    with pytest.raises(DatasetError, match="Error reading CSV"):
        load_dataset(str(path))


def test_load_dataset_missing_columns(tmp_path, diary):
    path = tmp_path / "partial.csv"
    diary.drop(columns=["guilt", "sleepNap"]).to_csv(path, sep=";", index=False)
    with pytest.raises(DatasetError, match="guilt"):
        load_dataset(str(path))


def test_load_dataset_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")
    with pytest.raises(DatasetError):
        load_dataset(str(path))


def test_split_variables(diary):
    response, predictor = split_variables(diary)
    assert list(response.columns) == RESPONSE_COLUMNS
    assert list(predictor.columns) == PREDICTOR_COLUMNS
    assert len(response) == len(predictor) == len(diary)


def test_crop_missing_leading_drops_through_last_gap():
    predictor = pd.DataFrame({"exercise": [np.nan, 1.0, np.nan, 0.0, 1.0], "x": range(5)})
    cropped, n_dropped = crop_missing_leading(predictor, "exercise")
    assert n_dropped == 3
    assert list(cropped["x"]) == [3, 4]
    assert list(cropped.index) == [0, 1]


def test_crop_missing_leading_nothing_missing():
    predictor = pd.DataFrame({"exercise": [1.0, 0.0]})
    cropped, n_dropped = crop_missing_leading(predictor)
    assert n_dropped == 0
    assert len(cropped) == 2


def test_crop_missing_leading_unknown_column():
    with pytest.raises(DatasetError):
        crop_missing_leading(pd.DataFrame({"a": [1.0]}), "exercise")

import pytest

from linear_gp.tasks import ClassificationTask, load_labeled_samples
from linear_gp.utils.errors import DataLoadError


def _write(tmp_path, text, name="samples.csv"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_string_labels_sorted(tmp_path):
    """String labels map to indices in sorted order."""
    path = _write(tmp_path, "5.1,3.5,Iris-setosa\n6.2,2.9,Iris-versicolor\n4.9,3.0,Iris-setosa\n")
    samples, names = load_labeled_samples(path)
    assert names == ["Iris-setosa", "Iris-versicolor"]
    assert [s.label for s in samples] == [0, 1, 0]
    assert samples[1].features.tolist() == [6.2, 2.9]


def test_integer_labels_used_directly(tmp_path):
    """Integer labels are class indices."""
    path = _write(tmp_path, "2,0.5,1.5\n0,0.1,0.2\n")
    samples, names = load_labeled_samples(path, label_column=0)
    assert [s.label for s in samples] == [2, 0]
    assert names == ["0", "1", "2"]
    assert samples[0].features.tolist() == [0.5, 1.5]


def test_explicit_class_names(tmp_path):
    """Given class names fix the label order and reject unknown labels."""
    path = _write(tmp_path, "1.0,b\n2.0,a\n")
    samples, names = load_labeled_samples(path, class_names=["b", "a"])
    assert [s.label for s in samples] == [0, 1]
    with pytest.raises(DataLoadError):
        load_labeled_samples(path, class_names=["a"])


def test_missing_file_and_bad_features(tmp_path):
    """Missing files and non-numeric features raise DataLoadError."""
    with pytest.raises(DataLoadError):
        load_labeled_samples(tmp_path / "nope.csv")
    path = _write(tmp_path, "x,1.0,a\n", name="bad.csv")
    with pytest.raises(DataLoadError):
        load_labeled_samples(path)


def test_classification_task_from_csv(tmp_path):
    """from_csv sizes the task from the file."""
    path = _write(tmp_path, "1.0,2.0,3.0,x\n4.0,5.0,6.0,y\n7.0,8.0,9.0,z\n")
    task = ClassificationTask.from_csv(path)
    assert task.input_count == 3
    assert task.action_count == 3
    assert len(task) == 3

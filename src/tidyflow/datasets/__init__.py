from .generator import load_dataset, make_ames, make_crickets, make_two_class, read_dataset_csv

__all__ = ["load_dataset", "make_ames", "make_crickets", "make_two_class", "read_dataset_csv"]

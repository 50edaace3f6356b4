from .csv_reader import CsvFormatError, normalize_header, parse_csv, read_csv_file, split_csv_line

__all__ = [
    "CsvFormatError",
    "normalize_header",
    "parse_csv",
    "read_csv_file",
    "split_csv_line",
]

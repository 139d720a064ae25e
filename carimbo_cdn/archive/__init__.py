from carimbo_cdn.archive.transform import strip_first_segment, strip_root_dir

__all__ = ["strip_first_segment", "strip_root_dir"]

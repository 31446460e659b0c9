"""Support library: configuration, process launching, banner rendering."""

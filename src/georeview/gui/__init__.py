"""Presentation-side helpers. Only :mod:`georeview.gui.qt_scheduler` needs Qt."""

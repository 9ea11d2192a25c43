"""Join and aggregation helpers.

This package resolves sanitized metric rows through their filing and company
(`join`) and turns the joined rows into the sorted, grouped `Dataset`
consumed by filtering and display (`build_dataset`).
"""

"""ChronoCost: project risk scoring from form input and historical CSVs."""

"""HTTP API over the snapshot and the upstream team/athlete data."""

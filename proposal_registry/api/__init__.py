"""HTTP interface for the proposal registry."""

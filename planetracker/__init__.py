"""Live SBS aircraft tracker."""

"""Rebar detailing toolbox."""

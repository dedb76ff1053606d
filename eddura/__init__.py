"""Scholarship and program discovery backend: quiz, matching, applications and document library."""

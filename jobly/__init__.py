"""Jobly: companies and jobs over a relational store."""

__version__ = "0.1.0"

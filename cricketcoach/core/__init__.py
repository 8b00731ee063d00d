"""
Core business logic for batting coaching.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or any infrastructure concerns. This separation means we can test the
assessment rules and the performance engine in isolation and swap
backing stores without touching them.
"""

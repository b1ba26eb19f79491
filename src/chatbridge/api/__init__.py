"""Outer surfaces of chatbridge."""

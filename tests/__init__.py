"""Test suite for graphql-response-cache."""

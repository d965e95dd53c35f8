"""Vector index management and k-NN retrieval on OpenSearch Serverless."""

__version__ = "0.1.0"

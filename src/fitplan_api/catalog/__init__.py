"""Exercise catalog: search client, remote proxy and dataset import."""

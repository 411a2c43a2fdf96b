DEFAULTS = {
    # Max composed candidates yielded per enumeration
    "MATCH_N": 10,
    # Minimum cosine similarity for a match candidate
    "MATCH_THRESHOLD": 0.5,
    # Minimum suggestion confidence accepted during propagation
    "INFERENCE_CONF_THRESHOLD": 0.15,
    # Maximum propagation passes before giving up on convergence
    "INFERENCE_MAX_ITERATIONS": 3,
    # Confidence delta under which two propagation tables are equal
    "INFERENCE_TOLERANCE": 0.001,
    # Sentence embedding model
    "EMBEDDING_MODEL": "sentence-transformers/all-MiniLM-L6-v2",
    # Device for the embedding model
    "EMBEDDING_DEVICE": "cpu",
    # L2-normalize embeddings
    "EMBEDDING_NORMALIZE": True,
    # Model used for property suggestions
    "SUGGESTER_MODEL": "TinyLlama/TinyLlama-1.1B-Chat-v1.0",
    # Suggestion output length limit (tokens)
    "SUGGESTER_MAX_NEW_TOKENS": 600,
    # Suggestion sampling temperature
    "SUGGESTER_TEMPERATURE": 0.2,
}

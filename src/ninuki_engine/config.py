"""
Configuration for the Ninuki-renju search engine.
"""

# Search Configuration
SEARCH_CONFIG = {
    'default_max_depth': 10,            # Used when the caller gives no depth
    'max_search_depth': 20,             # Size of the killer-move table
    'near_mate_threshold': 300000,      # |score| above this is a proven win/loss
    'lmr_min_depth': 3,                 # LMR only at remaining depth >= 3
    'lmr_min_move_index': 2,            # ... and from the 3rd candidate on
    'lmr_reduction': 2,                 # Reduced search is depth - 2
    'killer_slots': 2,

    # Depth by game phase (turn_count thresholds)
    'phase_depths': [
        {'until_turn': 5, 'depth': 6},      # Opening
        {'until_turn': 12, 'depth': 8},     # Midgame
        {'until_turn': None, 'depth': 10},  # Endgame
    ],
}

# Transposition Table Configuration
TT_CONFIG = {
    'size_log2': 20,                    # 1 << 20 slots
    'age_weight': 10,                   # Depth penalty per generation of age
    'mate_threshold': 590000,           # |score| at or above this is a mate (WIN minus headroom)
}

# Move Ordering Configuration
ORDERING_CONFIG = {
    'wide_radius_until_turn': 6,        # Radius 2 while turn_count <= 6
    'wide_radius': 2,
    'narrow_radius': 1,
    'candidate_limits': [
        {'until_turn': 4, 'max_candidates': 3},
        {'until_turn': 10, 'max_candidates': 4},
        {'until_turn': None, 'max_candidates': 5},
    ],
}

# Zobrist Configuration
ZOBRIST_CONFIG = {
    'seed': 0x12345678,                 # Fixed seed for reproducible keys
}

# Suggestion Engine Configuration
SUGGESTION_CONFIG = {
    'default_depth': 6,
    'candidate_radius': 2,
}

"""HTTP surface for the VibeGate request pipeline."""

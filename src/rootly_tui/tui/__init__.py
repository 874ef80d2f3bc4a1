"""Terminal UI: reducer, scheduler, effects and the Rich render loop."""

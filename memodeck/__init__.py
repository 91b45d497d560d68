"""Terminal front end for memodeck."""

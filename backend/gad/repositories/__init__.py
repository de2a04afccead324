# Repositories package init

"""ICS-20 cross-chain token transfer contract."""
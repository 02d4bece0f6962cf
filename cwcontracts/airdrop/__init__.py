"""Message and response types of a staged merkle-proof token airdrop."""